"""HTTP头与 Cookie 名称常量.

定义常用的HTTP头名称，避免魔法字符串。
"""


class HttpHeaders:
    """HTTP头常量."""

    CONTENT_TYPE = "Content-Type"
    CONTENT_DISPOSITION = "Content-Disposition"
    CACHE_CONTROL = "Cache-Control"
    SET_COOKIE = "Set-Cookie"
    X_FORWARDED_FOR = "X-Forwarded-For"
    X_REQUEST_ID = "X-Request-ID"

    # 首页快照命中情况: HIT / MISS / BYPASS
    X_CACHE = "X-Cache"


class CookieNames:
    """首页相关 Cookie 名称."""

    # 客户端认为自身视图已过期时携带,值为 "1"
    CACHE_STALE = "iori_cache_stale"
    LAST_CATEGORY = "iori_last_category"
    SESSION = "navhome_session"
