import json
import logging
from urllib.parse import quote

import requests

from config_cloner.command_response import CommandResult
from config_cloner.config import Config, Credentials
from config_cloner.constants import Constants
from config_cloner.entity_kinds import EntityKind
from config_cloner.utilities.helper import log_raise_value_error
from config_cloner.utilities.send_requests_to_jenkins import call_jenkins, is_success, operation_get, \
    operation_post, crumb_issuer_url_suffix

create_item_url_suffix = "createItem"
create_node_url_suffix = "computer/doCreateItem"
create_view_url_suffix = "createView"
delete_url_suffix = "doDelete"
dumb_slave_type = "hudson.slaves.DumbSlave"
crumb_key = "crumb"
crumb_request_field_key = "crumbRequestField"

# jenkins refuses doCreateItem without a complete node form; the real configuration is posted right after
placeholder_node_form = {
    "nodeDescription": "",
    "numExecutors": "1",
    "remoteFS": "/tmp",
    "labelString": "",
    "mode": "NORMAL",
    "type": dumb_slave_type,
    "retentionStrategy": {"stapler-class": "hudson.slaves.RetentionStrategy$Always"},
    "nodeProperties": {"stapler-class-bag": "true"},
    "launcher": {"stapler-class": "hudson.slaves.JNLPLauncher"},
}


class JenkinsConnection:
    """Runs the remote commands ``get-*``, ``create-*``, ``update-*`` and ``delete-*`` against one endpoint.

    The underlying ``requests.Session`` and the CSRF crumb are kept for the lifetime of the connection.
    """

    def __init__(self, endpoint: str, credentials: Credentials = None, timeout=None, logger: logging.Logger = None):
        self.logger = logger if logger else logging.getLogger(self.__class__.__name__)
        self.endpoint = endpoint
        self.credentials = credentials if credentials else Credentials()
        self.timeout = timeout
        self.closed = False
        self._session = requests.Session()
        self._crumb_headers = None

    def execute(self, command_name: str, entity_id: str, payload: str = "") -> CommandResult:
        if self.closed:
            log_raise_value_error(local_logger=self.logger, err=f"connection to {self.endpoint} is closed")
        verb, _, kind_name = command_name.partition("-")
        kind = EntityKind.from_name(kind_name)
        handlers = {"get": self._get, "create": self._create, "update": self._update, "delete": self._delete}
        if verb not in handlers:
            log_raise_value_error(local_logger=self.logger, err=f"unknown remote command {command_name}")
        self.logger.info(f"{command_name} {entity_id} on {self.endpoint}")
        try:
            return handlers[verb](command_name, kind, entity_id, payload)
        except requests.exceptions.RequestException as err:
            self.logger.error(f"{command_name} {entity_id} on {self.endpoint} failed: {err}")
            return CommandResult(exit_code=Constants.REMOTE_FAILURE,
                                 stderr=f"{command_name} {entity_id}: {err}\n")

    def close(self):
        if not self.closed:
            self.logger.info(f"closing the connection to {self.endpoint}")
            self._session.close()
            self.closed = True

    # job folders and nested views repeat the marker: job/a/job/b/, view/a/view/b/
    @staticmethod
    def entity_url(kind: EntityKind, entity_id: str) -> str:
        segments = [quote(segment, safe="") for segment in entity_id.split(Constants.SLASH_SIGN) if segment]
        return "".join(f"{kind.marker}/{segment}/" for segment in segments)

    def _get(self, command_name, kind, entity_id, payload):
        session_response = self._call(url_suffix=self.entity_url(kind, entity_id) + Constants.CONFIG_XML)
        return self._result(command_name, entity_id, session_response, keep_stdout=True)

    def _update(self, command_name, kind, entity_id, payload):
        session_response = self._call(url_suffix=self.entity_url(kind, entity_id) + Constants.CONFIG_XML,
                                      operation=operation_post, payload=payload)
        return self._result(command_name, entity_id, session_response)

    def _delete(self, command_name, kind, entity_id, payload):
        session_response = self._call(url_suffix=self.entity_url(kind, entity_id) + delete_url_suffix,
                                      operation=operation_post, form={})
        return self._result(command_name, entity_id, session_response)

    def _create(self, command_name, kind, entity_id, payload):
        if kind == EntityKind.NODE:
            return self._create_node(command_name, kind, entity_id, payload)
        parent, _, name = entity_id.rstrip(Constants.SLASH_SIGN).rpartition(Constants.SLASH_SIGN)
        url_suffix = self.entity_url(kind, parent) + \
            (create_view_url_suffix if kind == EntityKind.VIEW else create_item_url_suffix)
        session_response = self._call(url_suffix=url_suffix, operation=operation_post, payload=payload,
                                      params={"name": name})
        return self._result(command_name, entity_id, session_response)

    # nodes cannot be created from xml directly; create a placeholder then replace its configuration
    def _create_node(self, command_name, kind, entity_id, payload):
        node_form = dict(placeholder_node_form, name=entity_id)
        session_response = self._call(url_suffix=create_node_url_suffix, operation=operation_post,
                                      form={"name": entity_id, "type": dumb_slave_type,
                                            "json": json.dumps(node_form)})
        if not is_success(session_response):
            return self._result(command_name, entity_id, session_response)
        result = self._update(command_name, kind, entity_id, payload)
        if not result.succeeded():
            self.logger.warning(f"configuring the new node {entity_id} failed; deleting the placeholder")
            self._delete(kind.delete_command, kind, entity_id, "")
        return result

    def _call(self, url_suffix, operation=operation_get, payload=None, params=None, form=None):
        headers = self._get_crumb_headers() if operation == operation_post else None
        return call_jenkins(session=self._session, endpoint=self.endpoint, url_suffix=url_suffix,
                            operation=operation, payload=payload, params=params, form=form, headers=headers,
                            auth=self.credentials.auth, pem=self.credentials.pem, timeout=self.timeout)

    # the crumb is requested once; a server without a crumb issuer answers 404
    def _get_crumb_headers(self):
        if self._crumb_headers is None:
            session_response = call_jenkins(session=self._session, endpoint=self.endpoint,
                                            url_suffix=crumb_issuer_url_suffix, auth=self.credentials.auth,
                                            pem=self.credentials.pem, timeout=self.timeout)
            self._crumb_headers = {}
            crumb = {}
            if is_success(session_response):
                try:
                    crumb = session_response.json()
                except ValueError as err:
                    self.logger.warning(f"the crumb issuer of {self.endpoint} did not answer json: {err}")
            if isinstance(crumb, dict) and crumb.get(crumb_request_field_key):
                self._crumb_headers = {crumb.get(crumb_request_field_key): crumb.get(crumb_key)}
            else:
                self.logger.info(f"no crumb issued by {self.endpoint}: {session_response.status_code}")
        return self._crumb_headers

    def _result(self, command_name, entity_id, session_response, keep_stdout=False):
        if is_success(session_response):
            return CommandResult(stdout=session_response.text if keep_stdout else "")
        self.logger.error(f"{command_name} {entity_id} on {self.endpoint} failed with "
                          f"{session_response.status_code} {session_response.reason}")
        return CommandResult(exit_code=Constants.REMOTE_FAILURE,
                             stderr=f"{command_name} {entity_id}: {session_response.status_code} "
                                    f"{session_response.reason} ({self.endpoint})\n")


class ConnectionPool:
    """Keeps one JenkinsConnection per endpoint for the whole invocation.

    Not safe for concurrent use: ``get`` checks then creates without locking.
    """

    def __init__(self, config: Config = None, logger: logging.Logger = None):
        self.logger = logger if logger else logging.getLogger(self.__class__.__name__)
        self.config = config if config else Config()
        self.closed = False
        self._connections = {}

    def get(self, endpoint: str) -> JenkinsConnection:
        if self.closed:
            log_raise_value_error(local_logger=self.logger, err=f"the connection pool is closed; cannot connect to "
                                                                f"{endpoint}")
        connection = self._connections.get(endpoint)
        if connection is None:
            self.logger.info(f"opening a new connection to {endpoint}")
            connection = self.create_connection(endpoint)
            self._connections[endpoint] = connection
        return connection

    def create_connection(self, endpoint: str) -> JenkinsConnection:
        return JenkinsConnection(endpoint=endpoint, credentials=self.config.credentials_for(endpoint),
                                 timeout=self.config.timeout)

    def close(self):
        if self.closed:
            log_raise_value_error(local_logger=self.logger, err="the connection pool is already closed")
        self.logger.info(f"closing {len(self._connections)} connections")
        for connection in self._connections.values():
            connection.close()
        self._connections.clear()
        self.closed = True

    def __len__(self):
        return len(self._connections)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
