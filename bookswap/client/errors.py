"""
客户端错误分类

服务端返回 {"detail", "code"}，先按 code 映射，没有 code 时按 HTTP 状态码映射。
"""

import httpx


class BookSwapError(Exception):
    def __init__(self, detail: str, status_code: int | None = None, code: str | None = None):
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code
        self.code = code


class AuthError(BookSwapError):
    """凭据错误或会话失效"""


class AuthorizationError(BookSwapError):
    """无权操作目标资源"""


class InvalidStateError(BookSwapError):
    """当前状态不允许该迁移"""


class ConflictError(BookSwapError):
    """重复或竞争的修改"""


class NotFoundError(BookSwapError):
    pass


class NetworkError(BookSwapError):
    """传输层失败，不自动重试"""


class ValidationError(BookSwapError):
    pass


class InvalidResponseError(BookSwapError):
    """响应体不是预期的 JSON（如 api_url 指向了前端站点）"""


CODE_ERRORS: dict[str, type[BookSwapError]] = {
    "AUTH_ERROR": AuthError,
    "FORBIDDEN": AuthorizationError,
    "NOT_FOUND": NotFoundError,
    "CONFLICT": ConflictError,
    "INVALID_STATE": InvalidStateError,
    "VALIDATION_ERROR": ValidationError,
}

STATUS_ERRORS: dict[int, type[BookSwapError]] = {
    400: ValidationError,
    401: AuthError,
    403: AuthorizationError,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
}


def _detail_of(body) -> str | None:
    if not isinstance(body, dict):
        return None
    detail = body.get("detail")
    if isinstance(detail, list):
        # FastAPI 422：[{"loc": [...], "msg": "..."}]
        return "; ".join(str(item.get("msg", item)) if isinstance(item, dict) else str(item) for item in detail)
    return str(detail) if detail is not None else None


def error_from_response(response: httpx.Response) -> BookSwapError:
    try:
        body = response.json()
    except ValueError:
        body = None

    code = body.get("code") if isinstance(body, dict) else None
    detail = _detail_of(body) or response.text or response.reason_phrase
    status = response.status_code

    if status == 401:
        # 401 一律视为会话问题
        error_cls = AuthError
    else:
        error_cls = CODE_ERRORS.get(code or "") or STATUS_ERRORS.get(status, BookSwapError)
    return error_cls(f"API error ({status}): {detail}", status_code=status, code=code)
