"""Anonymous questionnaire submission service.

Answers are stored without attribution; a separate append-only ledger
keeps the link between a submission identity and the declared name.
"""

__version__ = "0.1.0"
