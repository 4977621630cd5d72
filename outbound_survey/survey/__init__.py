from outbound_survey.survey.configuration import SurveyConfiguration
from outbound_survey.survey.orchestrator import SurveyOrchestrator
from outbound_survey.survey.builder import SurveyBuilder


__all__ = [
    "SurveyBuilder",
    "SurveyConfiguration",
    "SurveyOrchestrator",
]
