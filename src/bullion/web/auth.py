"""
管理接口鉴权
清空缓存等管理操作需要在 X-Admin-Token 请求头中携带管理令牌
"""

import secrets
from typing import Optional

from fastapi import Header, HTTPException, Request

ADMIN_HEADER = "X-Admin-Token"


def check_admin_token(expected: str, provided: Optional[str]) -> bool:
    """常量时间比较令牌；未配置令牌时放行"""
    if not expected:
        return True
    if not provided:
        return False
    return secrets.compare_digest(expected.encode(), provided.encode())


async def require_admin(
    request: Request,
    x_admin_token: Optional[str] = Header(default=None, alias=ADMIN_HEADER),
) -> None:
    """FastAPI 依赖：校验管理令牌"""
    expected = request.app.state.config.admin_token
    if not check_admin_token(expected, x_admin_token):
        raise HTTPException(status_code=403, detail="需要管理员权限")
