"""
Invoice Payment Processor - applies incoming payments to invoices.

Decides, for each payment:
- Whether the invoice still needs paying
- Whether the payment fits the amount or remaining balance
- How much tax the payment accrues, by invoice type
"""

__version__ = "1.0.0"
