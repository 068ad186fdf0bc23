class ServiceError(Exception):
    """业务异常基类，由 main.py 统一渲染为 {"detail", "code"}"""

    def __init__(self, detail: str, status_code: int = 400, code: str = "VALIDATION_ERROR"):
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code
        self.code = code
