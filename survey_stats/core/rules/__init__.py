"""
Submission validation engine and rule configuration management.
"""

from .rule_config import RuleConfigBuilder, RuleConfigLoader, default_survey_rules
from .submission_validator import SubmissionValidator

__all__ = [
    "SubmissionValidator",
    "RuleConfigLoader",
    "RuleConfigBuilder",
    "default_survey_rules",
]
