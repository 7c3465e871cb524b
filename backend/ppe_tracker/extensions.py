# Overview: Shared Flask extensions; db backs every model and service, migrate drives `flask db`.

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
migrate = Migrate()
