from enum import Enum


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"      # percent of the line total
    FIXED_AMOUNT = "fixed_amount"  # flat amount per unit
