import logging

import requests
import urllib3

from config_cloner.utilities.helper import log_raise_value_error

operation_get = "get"
operation_post = "post"

application_xml = "application/xml"
content_type_key = "Content-Type"
crumb_issuer_url_suffix = "crumbIssuer/api/json"

logger = logging.getLogger(__name__)


# the caller owns the session so that cookies and the crumb survive between calls to the same endpoint;
# transport errors (requests.exceptions.RequestException) are left to the caller
def call_jenkins(session: requests.Session, endpoint: str, url_suffix=None, operation=None, payload=None,
                 params=None, form=None, headers=None, auth=None, pem=True, timeout=None):
    if pem is False:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
    url = endpoint + url_suffix if url_suffix else endpoint
    operation = operation if operation else operation_get
    headers = dict(headers) if headers else {}
    logger.info(f"{operation}: " + url)
    if operation.lower() == operation_get:
        session_response = session.get(url, params=params, headers=headers, auth=auth, verify=pem, timeout=timeout)
    elif operation.lower() == operation_post:
        if payload is not None:
            headers[content_type_key] = f"{application_xml}; charset=utf-8"
            data = payload.encode("utf-8")
        else:
            data = form
        session_response = session.post(url, params=params, data=data, headers=headers, auth=auth, verify=pem,
                                        timeout=timeout)
    else:
        log_raise_value_error(local_logger=logger,
                              err=f"Invalid operation: {operation}; only get and post are supported")
    logger.info("response status code: " + str(session_response.status_code))
    return session_response


def is_success(session_response) -> bool:
    return 200 <= session_response.status_code <= 299
