from .inventory import PpeItem, Category, Department, ReceiveTransaction, IdSequence
from .vouchers import IssueVoucher
from .loans import LoanTransaction
from .auxiliary import Feedback, MatrixRule, PpeDocument

__all__ = [
    'PpeItem', 'Category', 'Department', 'ReceiveTransaction', 'IdSequence',
    'IssueVoucher',
    'LoanTransaction',
    'Feedback', 'MatrixRule', 'PpeDocument',
]
