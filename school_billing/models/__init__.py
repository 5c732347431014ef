# Import every model so Base.metadata knows about all tables
from school_billing.models.base import Base
from school_billing.models.school import SchoolClass, Student
from school_billing.models.fee import FeeType, FeeStructure
from school_billing.models.voucher import Voucher, VoucherLineItem

__all__ = [
    "Base",
    "SchoolClass",
    "Student",
    "FeeType",
    "FeeStructure",
    "Voucher",
    "VoucherLineItem",
]
