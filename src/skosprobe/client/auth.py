"""认证请求头构建。"""

import base64

from skosprobe.models.endpoint import ApiKeyAuth, BasicAuth, BearerAuth, EndpointAuth, NoAuth


def build_auth_headers(auth: EndpointAuth) -> dict[str, str]:
    """根据端点认证方式生成请求头。

    Args:
        auth: 端点认证配置。

    Returns:
        至多包含一个认证头的字典。
    """
    match auth:
        case BasicAuth(username=username, password=password):
            token = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
            return {"Authorization": f"Basic {token}"}
        case BearerAuth(token=token):
            return {"Authorization": f"Bearer {token}"}
        case ApiKeyAuth(header_name=header_name, api_key=api_key):
            return {header_name: api_key}
        case NoAuth():
            return {}
    return {}
