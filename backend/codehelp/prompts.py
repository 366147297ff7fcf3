"""Prompts for the error-explanation endpoint."""

from __future__ import annotations

from codehelp.models import ExplainRequest

SYSTEM_PROMPT = (
    "你是编程老师，擅长分析代码和错误信息，一般出错在语法和格式，"
    "请指出错误在第几行，并给出中文的、简要的解决方法。用 markdown 格式返回。"
)

USER_PROMPT_TEMPLATE = (
    "编程语言：{language}\n"
    "代码：\n```{code}\n```\n"
    "错误信息：\n```{error_info}\n```"
)


def build_user_prompt(request: ExplainRequest) -> str:
    return USER_PROMPT_TEMPLATE.format(
        language=request.language,
        code=request.code,
        error_info=request.error_info,
    )


def build_messages(request: ExplainRequest) -> list[dict[str, str]]:
    """System + user messages in chat-completion format."""
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_user_prompt(request)},
    ]
