from __future__ import annotations

import platform

from .version import __version__

SDK_ANALYTICS_HEADER = "X-IBMCloud-SDK-Analytics"
USER_AGENT_HEADER = "User-Agent"


def user_agent() -> str:
    return (
        f"discovery-client-python/{__version__} "
        f"({platform.system().lower()}; python {platform.python_version()})"
    )


def get_sdk_headers(service_name: str, service_version: str, operation_id: str) -> dict[str, str]:
    analytics = f"service_name={service_name};service_version={service_version};operation_id={operation_id}"
    return {
        USER_AGENT_HEADER: user_agent(),
        SDK_ANALYTICS_HEADER: analytics,
    }
