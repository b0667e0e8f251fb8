class TTL:
    RESULT = 60 * 60 * 24  # 24시간


class RedisPrefix:
    RESULT = "result"


class Limits:
    MAX_UPLOAD_SIZE = 10 * 1024 * 1024  # 10MB


# 워터마크/저작권 문구 (번역 및 렌더링 대상에서 제외)
BOILERPLATE_MARKERS = (
    "公众号",
    "智能体爱好者",
    "扫码关注",
    "版权所有",
    "Copyright",
)
