"""Questionnaire services.

- submission_service: admission, validation, anonymization and storage
  of questionnaire submissions
"""
