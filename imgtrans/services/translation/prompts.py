"""번역 프롬프트 및 용어집"""

from collections.abc import Iterable, Mapping

LANGUAGE_NAMES = {
    "zh": "Simplified Chinese",
    "en": "English",
    "ja": "Japanese",
    "jp": "Japanese",
    "ko": "Korean",
    "kor": "Korean",
    "fr": "French",
    "de": "German",
    "es": "Spanish",
    "ru": "Russian",
}

# AI/에이전트 도메인 용어 (중국어 대상일 때 기본 적용)
DEFAULT_GLOSSARY = {
    "Agent": "智能体",
    "Model": "模型",
    "Tool": "工具",
    "Vector DB": "向量数据库",
    "Postgres DB": "Postgres 数据库",
    "Task Queue": "任务队列",
    "Config Manager": "配置管理器",
    "Resource Manager": "资源管理器",
    "Message Broker": "消息代理",
    "Message Handler": "消息处理器",
    "Knowledge": "知识库",
    "Experience": "经验",
    "Trajectory": "轨迹",
    "Actor": "行动者",
    "Self-reflection": "自我反思",
    "Evaluator": "评估器",
    "Environment": "环境",
    "Long-term memory": "长期记忆",
    "Short-term memory": "短期记忆",
    "External feedback": "外部反馈",
    "Internal feedback": "内部反馈",
    "Reflective text": "反思文本",
    "Action": "行动",
    "Reward": "奖励",
    "SuperAGI": "SuperAGI",
    "Executor": "执行器",
    "Workflow": "工作流",
    "Agent Execution Feed": "智能体执行反馈",
}

SINGLE_PROMPT = (
    "You are a professional translation engine. "
    "Your task is to translate the user's text into {language}. "
    "You must only output the translated text. Do not output explanations or any other text."
)

BULK_PROMPT = (
    "You are a professional translation engine. "
    "You will be given a list of phrases to translate to {language}. "
    "The phrases are all from a single image, so use the full context. "
    "{reply_instruction} "
    "Do not add any extra text, explanations, or markdown. "
    "The number of translated phrases in your response must exactly match "
    "the number of phrases in the user's request."
)


def language_name(code: str) -> str:
    """언어 코드 → 프롬프트용 영어 이름 (모르는 코드는 그대로)"""
    return LANGUAGE_NAMES.get(code.lower(), code)


def is_chinese(code: str) -> bool:
    return code.lower().startswith("zh")


def relevant_terms(texts: Iterable[str], glossary: Mapping[str, str]) -> list[tuple[str, str]]:
    """텍스트에 실제로 등장하는 용어만 (대소문자 무시)"""
    content = " ".join(texts).lower()
    return [(term, value) for term, value in glossary.items() if term.lower() in content]


def glossary_clause(terms: list[tuple[str, str]]) -> str:
    if not terms:
        return ""
    rules = "; ".join(f"'{term}' -> '{value}'" for term, value in terms)
    return f"\n\nCRITICAL: You must follow this glossary: {rules}."


def single_system_prompt(target_lang: str, terms: list[tuple[str, str]]) -> str:
    return SINGLE_PROMPT.format(language=language_name(target_lang)) + glossary_clause(terms)


def bulk_system_prompt(
    target_lang: str, reply_instruction: str, terms: list[tuple[str, str]]
) -> str:
    prompt = BULK_PROMPT.format(
        language=language_name(target_lang), reply_instruction=reply_instruction
    )
    return prompt + glossary_clause(terms)
