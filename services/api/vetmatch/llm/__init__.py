from vetmatch.llm.assessment_parser import (
    AssessmentResult,
    ParsedAssessment,
    RawAssessment,
    assessment_response,
    extract_first_json_object,
    parse_assessment,
)
from vetmatch.llm.client import LLMUnavailableError, TextGenerator, generate_text, invoke_llm
from vetmatch.llm.prompts import build_step_prompt

__all__ = [
    "invoke_llm",
    "generate_text",
    "TextGenerator",
    "LLMUnavailableError",
    "build_step_prompt",
    "extract_first_json_object",
    "parse_assessment",
    "assessment_response",
    "AssessmentResult",
    "ParsedAssessment",
    "RawAssessment",
]
