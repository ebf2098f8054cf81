from fastapi import Request

from pulse.core.config import Settings


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was created with"""
    return request.app.state.settings
