"""Drop synthetic health-check traffic before it reaches the statistics."""

HEALTH_CHECK_USER_AGENT = "Ruby"
HEALTH_CHECK_REQUEST = "GET /ok HTTP/1.1"


def is_health_check_agent(user_agent: str) -> bool:
    return user_agent == HEALTH_CHECK_USER_AGENT


def is_health_check_request(request: str) -> bool:
    return request == HEALTH_CHECK_REQUEST


def should_exclude(user_agent: str, request: str) -> bool:
    # Both must hold: a browser hitting /ok, or the monitor hitting any other
    # path, is still counted.
    return is_health_check_agent(user_agent) and is_health_check_request(request)
