"""Prompt templates exposed through MCP."""

CODE_REVIEW_TEMPLATE = """You are an experienced Python backend developer with strong PostgreSQL experience. You are asked to review the following file:
@{file_name}
Respond with:
1) Make sure there is no logic error.
2) Check for any issues with leaking resources.
3) Check if the code is well-formatted with proper indentation.
4) If no issues are found, state "No issues found" and note residual risks.
"""


def code_review_message(file_name: str) -> str:
    """Build the user message for a code review of ``file_name``."""
    return CODE_REVIEW_TEMPLATE.format(file_name=(file_name or "").strip())
