"""
iso20022-generator: builds ISO 20022 pain.001 customer credit transfer
initiation messages and serializes them to XML.
"""

from .builder import Pain001Builder
from .models import Document, Initialization, Receiver, Transaction, ValidationReport
from .parser import Pain001Parser
from .validator import Validator
from .writer import XMLWriter

__all__ = [
    "Pain001Builder",
    "Initialization",
    "Receiver",
    "Transaction",
    "Document",
    "ValidationReport",
    "Validator",
    "XMLWriter",
    "Pain001Parser",
]
