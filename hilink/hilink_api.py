#!/usr/bin/env python3
"""
Huawei HiLink Router API Wrapper

A Python API wrapper providing programmatic access to the WebUI API of
Huawei HiLink LTE routers and modems (E5186, B525, E3372 and friends).

Features:
- Session bootstrap and optional login (password_type 4)
- Rotating CSRF token handling, one request in flight per client
- Ordered XML request bodies
- Typed device errors with a fallback error message table
- Device, network, SMS, PIN and USSD endpoints

Usage:
    from hilink import HilinkAPI

    api = HilinkAPI(url="http://192.168.8.1/",
                    username="admin", password="secret")

    # Get device information
    info = api.device_info()
    print(f"Model: {info['DeviceName']}")
    print(f"Firmware: {info['SoftwareVersion']}")

    # Get signal information
    signal = api.signal_info()
    print(f"RSRP: {signal['rsrp']}")

    # Send an SMS
    api.sms_send("hello", "+15551234567")

Most endpoints are taken from:
    https://blog.hqcodeshop.fi/archives/259-Huawei-E5186-AJAX-API.html
    https://github.com/BlackyPanther/Huawei-HiLink/blob/master/hilink.class.php
"""

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import requests
import urllib3
from urllib3.exceptions import InsecureRequestWarning

from .exceptions import (
    BadStatusCodeError,
    DeviceError,
    InvalidResponseError,
    MessageTooLongError,
    PreconditionViolated,
)
from .hilink_auth import (
    LOGIN_PATH,
    SESSION_INFO_PATH,
    CredentialStore,
    Credentials,
    credentials_from_env,
    parse_login_result,
    parse_session_info,
)
from .models import DataEnvelope, OkEnvelope, PinType, SmsBoxType, UssdState
from .response import Mode, as_data, as_ok, classify
from .session import SESSION_COOKIE, TOKEN_HEADER, SessionState
from .xml_codec import Body, decode, encode_request

_LOGGER = logging.getLogger(__name__)

# Default URL of the HiLink WebUI
DEFAULT_URL = "http://192.168.8.1/"

# Default request timeout in seconds
DEFAULT_TIMEOUT = 10.0

# SMS content must be shorter than this
SMS_MAX_LENGTH = 160

CONTENT_TYPE = "application/x-www-form-urlencoded; charset=UTF-8"


def normalize_url(url: str) -> str:
    """Base URL with a trailing slash, as endpoint paths are relative"""
    return url if url.endswith("/") else url + "/"


def cookie_domain(url: str) -> str:
    """
    Domain the cookie jar files a host's own cookies under

    Matches what http.cookiejar records for a Set-Cookie without a Domain
    attribute, so a cookie set by the device replaces ours.
    """
    host = urlparse(url).hostname or ""
    return host if "." in host else host + ".local"


def bool_to_string(value: bool) -> str:
    """The WebUI encodes booleans as '1'/'0'"""
    return "1" if value else "0"


def _log_exchange(response: requests.Response, *args, **kwargs) -> None:
    """requests response hook dumping the full exchange at DEBUG level"""
    request = response.request
    body = request.body
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    _LOGGER.debug(
        "HTTP request: %s %s\n%s\n\n%s",
        request.method, request.url,
        "\n".join(f"{k}: {v}" for k, v in request.headers.items()), body or "",
    )
    _LOGGER.debug(
        "HTTP response: %s %s\n%s\n\n%s",
        response.status_code, response.reason,
        "\n".join(f"{k}: {v}" for k, v in response.headers.items()), response.text,
    )


class HilinkAPI:
    """API wrapper for Huawei HiLink devices"""

    def __init__(self, url: str = DEFAULT_URL,
                 username: Optional[str] = None,
                 password: Optional[str] = None,
                 credentials: Optional[Credentials] = None,
                 timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None,
                 verify_tls: bool = True,
                 log_http: bool = False):
        """
        Initialize HiLink API

        No request is sent here; the session is started on first use (or by
        start_session()).

        Args:
            url: WebUI base URL
            username: Login username; login is skipped when empty
            password: Login password, hashed immediately and not retained
            credentials: Pre-hashed credentials (instead of username/password)
            timeout: Timeout in seconds for every request
            session: requests.Session to use (a new one by default)
            verify_tls: Verify certificates when the WebUI is served over HTTPS
            log_http: Log complete requests and responses at DEBUG level
        """
        self.url = normalize_url(url)
        self.timeout = timeout

        if credentials is None and username:
            credentials = Credentials.from_password(username, password or "")
        self.credentials = credentials

        self.state = SessionState()
        self._lock = threading.Lock()
        self._ready = False
        self._logged_in = False

        # Setup session
        self.session = session or requests.Session()
        if not verify_tls:
            self.session.verify = False
            urllib3.disable_warnings(InsecureRequestWarning)
        if log_http:
            self.session.hooks["response"].append(_log_exchange)

    # ========================================================================
    # Convenience Constructors
    # ========================================================================

    @classmethod
    def login(cls, url: str = DEFAULT_URL,
              username: str = "admin",
              password: str = "",
              save_credentials: bool = False,
              credentials_file: Optional[Path] = None,
              **kwargs) -> "HilinkAPI":
        """
        Create API instance and log in right away

        Args:
            url: WebUI base URL
            username: Username (default: 'admin')
            password: Password
            save_credentials: Save url, username and password digest to ~/.hilink
            credentials_file: Optional custom credentials file path
            **kwargs: Passed to HilinkAPI()

        Returns:
            HilinkAPI instance with an established session

        Raises:
            DeviceError: The device refused the login (e.g. 108006)
            InvalidResponseError: The login exchange was incomplete

        Example:
            >>> api = HilinkAPI.login(
            ...     url="http://192.168.8.1/",
            ...     username="admin",
            ...     password="mypassword",
            ...     save_credentials=True
            ... )
        """
        api = cls(url=url, username=username, password=password, **kwargs)
        api.start_session()

        if save_credentials:
            CredentialStore(credentials_file).save(api.url, api.credentials)

        return api

    @classmethod
    def from_saved_credentials(cls, credentials_file: Optional[Path] = None,
                               **kwargs) -> "HilinkAPI":
        """
        Create API instance using saved credentials from ~/.hilink

        Raises:
            ValueError: If no saved credentials are found

        Example:
            >>> api = HilinkAPI.from_saved_credentials()
        """
        url, credentials = CredentialStore(credentials_file).load()

        if not url or not credentials:
            raise ValueError("No saved credentials found. "
                             "Use HilinkAPI.login(..., save_credentials=True) first.")

        return cls(url=url, credentials=credentials, **kwargs)

    @classmethod
    def from_env(cls, **kwargs) -> "HilinkAPI":
        """
        Create API instance using environment variables

        Environment variables:
            HILINK_URL: WebUI URL (default: http://192.168.8.1/)
            HILINK_USERNAME: Username (login is skipped when unset)
            HILINK_PASSWORD: Password
            HILINK_TIMEOUT: Request timeout in seconds

        Example:
            >>> # export HILINK_URL="http://192.168.8.1/"
            >>> # export HILINK_USERNAME="admin"
            >>> # export HILINK_PASSWORD="secret"
            >>> api = HilinkAPI.from_env()
        """
        url, credentials, timeout = credentials_from_env()
        if timeout is not None:
            kwargs.setdefault("timeout", timeout)
        return cls(url=url, credentials=credentials, **kwargs)

    # ========================================================================
    # Session Handling
    # ========================================================================

    @property
    def logged_in(self) -> bool:
        return self._logged_in

    def start_session(self) -> None:
        """Bootstrap the session (and log in) now instead of on first use"""
        with self._lock:
            self._ensure_session()

    def set_url(self, url: str) -> None:
        """Point the client at another device; the current session is dropped"""
        with self._lock:
            self.url = normalize_url(url)
            self.state.clear()
            self.session.cookies.clear()
            self._ready = False
            self._logged_in = False

    def close(self) -> None:
        self.session.close()

    def _install_session(self, session_id: str, token: str, login: bool = False) -> None:
        """Replace cookie jar and token with a freshly issued pair"""
        self.session.cookies.clear()
        self.session.cookies.set(SESSION_COOKIE, session_id,
                                 domain=cookie_domain(self.url), path="/")
        if login:
            self.state.replace(session_id, token)
        else:
            self.state.bootstrap(session_id, token)

    def _ensure_session(self) -> None:
        # caller holds self._lock
        if self._ready:
            return

        self._bootstrap()
        if self.credentials is not None and self.credentials.username:
            self._login()
        self._ready = True

    def _bootstrap(self) -> None:
        response = self._exchange(SESSION_INFO_PATH, None)
        data = as_data(decode(response.content, True))
        session_id, token = parse_session_info(data)
        self._install_session(session_id, token)

    def _login(self) -> None:
        body = self.credentials.login_fields(self.state.token)
        response = self._exchange(LOGIN_PATH, body)
        result = as_ok(decode(response.content, False))
        session_id, token = parse_login_result(result, response)
        self._install_session(session_id, token, login=True)
        self._logged_in = True
        _LOGGER.info("Logged in to %s as %s", self.url, self.credentials.username)

    def _exchange(self, path: str, body: Optional[Body]) -> requests.Response:
        """
        Send one request and record the token it hands back

        GET is used when body is None, otherwise POST with the XML body and
        the current CSRF token. Caller holds self._lock.
        """
        url = f"{self.url}{path.lstrip('/')}"
        headers = {}

        if body is None:
            method, data = "GET", None
        else:
            method, data = "POST", encode_request(body)
            headers["Content-Type"] = CONTENT_TYPE
            if self.state.token:
                headers[TOKEN_HEADER] = self.state.token

        response = self.session.request(method, url, data=data, headers=headers,
                                        timeout=self.timeout)
        _LOGGER.debug("%s %s -> %s", method, path, response.status_code)

        if not 200 <= response.status_code < 300:
            raise BadStatusCodeError(response.status_code, path)

        # the token advances even if the body turns out to be unusable
        self.state.observe(response.headers, response.cookies.get(SESSION_COOKIE))
        return response

    # ========================================================================
    # Request Entry Points
    # ========================================================================

    def invoke(self, path: str, body: Optional[Body] = None,
               mode: Mode = Mode.DATA, field: Optional[str] = None):
        """
        Send a request and interpret the response

        Args:
            path: Endpoint path relative to the base URL (e.g. 'api/device/signal')
            body: Ordered (name, value) pairs or a raw XML payload;
                  None sends a GET
            mode: Mode.DATA, Mode.STRING or Mode.OK
            field: Child element to return in Mode.STRING

        Returns:
            DataEnvelope, the field text, or OkEnvelope depending on mode

        Raises:
            DeviceError: The device answered with an <error> document
            BadStatusCodeError: Non-2xx HTTP status
            ProtocolError: The body could not be interpreted
            requests.RequestException: Transport failure (timeout, refused)
        """
        if mode is Mode.STRING and not field:
            raise PreconditionViolated("Mode.STRING needs a field name")

        with self._lock:
            self._ensure_session()
            response = self._exchange(path, body)
            return classify(decode(response.content, mode.single_element), mode, field)

    def do(self, path: str, body: Optional[Body] = None) -> Dict[str, Any]:
        """Send a request returning structured data; returns the root's fields"""
        envelope: DataEnvelope = self.invoke(path, body, Mode.DATA)
        return envelope.fields

    def do_string(self, path: str, body: Optional[Body], name: str) -> str:
        """Send a request, returning the text of child element `name`"""
        return self.invoke(path, body, Mode.STRING, name)

    def do_check_ok(self, path: str, body: Optional[Body] = None) -> bool:
        """Send a command, checking success via <response>OK</response>"""
        envelope: OkEnvelope = self.invoke(path, body, Mode.OK)
        return envelope.success

    # ========================================================================
    # Configuration Endpoints
    # ========================================================================

    def global_config(self) -> Dict[str, Any]:
        """Retrieve the global HiLink configuration"""
        return self.do("config/global/config.xml")

    def network_types(self) -> Dict[str, Any]:
        """Retrieve the available network types"""
        return self.do("config/global/net-type.xml")

    def pc_assistant_config(self) -> Dict[str, Any]:
        """Retrieve the PC Assistant configuration"""
        return self.do("config/pcassistant/config.xml")

    def device_config(self) -> Dict[str, Any]:
        """Retrieve device configuration"""
        return self.do("config/deviceinformation/config.xml")

    def webui_config(self) -> Dict[str, Any]:
        """Retrieve the WebUI configuration"""
        return self.do("config/webuicfg/config.xml")

    def sms_config(self) -> Dict[str, Any]:
        """Retrieve device SMS configuration"""
        return self.do("api/sms/config")

    def wlan_basic_settings(self) -> Dict[str, Any]:
        """Retrieve the basic WLAN settings"""
        return self.do("api/wlan/basic-settings")

    def cradle_status_info(self) -> Dict[str, Any]:
        """Retrieve cradle status information"""
        return self.do("api/cradle/status-info")

    # ========================================================================
    # Device Endpoints
    # ========================================================================

    def autorun_version(self) -> str:
        """Retrieve autorun version"""
        return self.do_string("api/device/autorun-version", None, "Version")

    def device_basic_info(self) -> Dict[str, Any]:
        """Retrieve basic device information"""
        return self.do("api/device/basic_information")

    def public_key(self) -> str:
        """Retrieve the WebUI RSA public key modulus"""
        return self.do_string("api/webserver/publickey", None, "encpubkeyn")

    def reboot(self) -> bool:
        """Restart the device"""
        return self.do_check_ok("api/device/control", [("Control", "1")])

    def device_features(self) -> Dict[str, Any]:
        """Retrieve device feature information"""
        return self.do("api/device/device-feature-switch")

    def device_info(self) -> Dict[str, Any]:
        """
        Retrieve device information

        Example:
            >>> api.device_info()
            {
                "DeviceName": "B525s-23a",
                "SerialNumber": "...",
                "Imei": "...",
                "HardwareVersion": "WL2B520M",
                "SoftwareVersion": "11.189.63.00.74",
                "WanIPAddress": "10.64.12.7",
                ...
            }
        """
        return self.do("api/device/information")

    def signal_info(self) -> Dict[str, Any]:
        """
        Retrieve signal information

        Values are strings with units as sent by the device
        (e.g. 'rsrp': '-97dBm', 'rsrq': '-9.0dB', 'sinr': '12dB').
        """
        return self.do("api/device/signal")

    def global_features(self) -> Dict[str, Any]:
        """Retrieve global feature information"""
        return self.do("api/global/module-switch")

    def language(self) -> str:
        """Retrieve the current WebUI language"""
        return self.do_string("api/language/current-language", None, "CurrentLanguage")

    # ========================================================================
    # Monitoring / Network Endpoints
    # ========================================================================

    def notification_info(self) -> Dict[str, Any]:
        """Retrieve notification information"""
        return self.do("api/monitoring/check-notifications")

    def sim_info(self) -> Dict[str, Any]:
        """Retrieve SIM card information"""
        return self.do("api/monitoring/converged-status")

    def status_info(self) -> Dict[str, Any]:
        """Retrieve connection status information"""
        return self.do("api/monitoring/status")

    def traffic_statistics(self) -> Dict[str, Any]:
        """Retrieve traffic statistics"""
        return self.do("api/monitoring/traffic-statistics")

    def network_info(self) -> Dict[str, Any]:
        """Retrieve network provider information"""
        return self.do("api/net/current-plmn")

    def wifi_features(self) -> Dict[str, Any]:
        """Retrieve wifi feature information"""
        return self.do("api/wlan/wifi-feature-switch")

    def mode_info(self) -> Dict[str, Any]:
        """Retrieve network mode information"""
        return self.do("api/net/net-mode")

    # ========================================================================
    # Dialup Endpoints
    # ========================================================================

    def connection_info(self) -> Dict[str, Any]:
        """Retrieve connection (dialup) information"""
        return self.do("api/dialup/connection")

    def profile_info(self) -> Dict[str, Any]:
        """Retrieve profile information (ie, APN)"""
        return self.do("api/dialup/profiles")

    def connect(self) -> bool:
        """Connect the device to the network provider"""
        return self.do_check_ok("api/dialup/dial", [("Action", "1")])

    def disconnect(self) -> bool:
        """Disconnect the device from the network provider"""
        return self.do_check_ok("api/dialup/dial", [("Action", "0")])

    # ========================================================================
    # SIM PIN Endpoints
    # ========================================================================

    def pin_info(self) -> Dict[str, Any]:
        """Retrieve SIM PIN status information"""
        return self.do("api/pin/status")

    def _pin_operate(self, pin_type: PinType, current: str, new: str = "", puk: str = "") -> bool:
        return self.do_check_ok("api/pin/operate", [
            ("OperateType", str(int(pin_type))),
            ("CurrentPin", current),
            ("NewPin", new),
            ("PukCode", puk),
        ])

    def pin_enter(self, pin: str) -> bool:
        """Enter the SIM PIN"""
        return self._pin_operate(PinType.ENTER, pin)

    def pin_activate(self, pin: str) -> bool:
        """Activate the SIM PIN"""
        return self._pin_operate(PinType.ACTIVATE, pin)

    def pin_deactivate(self, pin: str) -> bool:
        """Deactivate the SIM PIN"""
        return self._pin_operate(PinType.DEACTIVATE, pin)

    def pin_change(self, pin: str, new: str) -> bool:
        """Change the SIM PIN"""
        return self._pin_operate(PinType.CHANGE, pin, new)

    def pin_enter_puk(self, puk: str, new: str) -> bool:
        """Unblock the SIM with its PUK, setting a new PIN"""
        return self._pin_operate(PinType.ENTER_PUK, new, new, puk)

    # ========================================================================
    # SMS Endpoints
    # ========================================================================

    def sms_list(self, box: SmsBoxType = SmsBoxType.INBOX, page: int = 1, count: int = 20,
                 ascending: bool = False, unread_preferred: bool = False) -> Dict[str, Any]:
        """
        Retrieve a page of SMS from a folder

        Returns:
            Dict with 'Count' and 'Messages'; 'Messages' holds one 'Message'
            dict, or a list of them when there are several
        """
        # the order is important!
        return self.do("api/sms/sms-list", [
            ("PageIndex", str(page)),
            ("ReadCount", str(count)),
            ("BoxType", str(int(box))),
            ("SortType", "0"),
            ("Ascending", bool_to_string(ascending)),
            ("UnreadPreferred", bool_to_string(unread_preferred)),
        ])

    def sms_count(self) -> Dict[str, Any]:
        """Retrieve the count of SMS per folder"""
        return self.do("api/sms/sms-count")

    def sms_send(self, msg: str, *to: str) -> bool:
        """
        Send an SMS

        Args:
            msg: Message text, shorter than 160 characters
            *to: One or more recipient numbers

        Raises:
            MessageTooLongError: msg has 160 characters or more (nothing is sent)
        """
        if len(msg) >= SMS_MAX_LENGTH:
            raise MessageTooLongError(
                f"SMS is {len(msg)} characters, must be shorter than {SMS_MAX_LENGTH}")
        if not to:
            raise PreconditionViolated("sms_send needs at least one recipient")

        # order matters below!
        return self.do_check_ok("api/sms/send-sms", [
            ("Index", "-1"),
            ("Phones", [("Phone", number) for number in to]),
            ("Sca", ""),
            ("Content", msg),
            ("Length", str(len(msg))),
            ("Reserved", "1"),
            ("Date", datetime.now().strftime("%Y-%m-%d %H:%M:%S")),
        ])

    def sms_send_status(self) -> Dict[str, Any]:
        """Retrieve the SMS send status information"""
        return self.do("api/sms/send-status")

    def sms_set_read(self, index: str) -> bool:
        """Mark an SMS as read"""
        return self.do_check_ok("api/sms/set-read", [("Index", str(index))])

    def sms_delete(self, index: str) -> bool:
        """Delete an SMS"""
        return self.do_check_ok("api/sms/delete-sms", [("Index", str(index))])

    # ========================================================================
    # USSD Endpoints
    # ========================================================================

    def ussd_status(self) -> UssdState:
        """Determine if the device is currently engaged in a USSD session"""
        result = self.do_string("api/ussd/status", None, "result")
        try:
            return UssdState(int(result))
        except ValueError:
            raise InvalidResponseError(f"unknown USSD state {result!r}") from None

    def ussd_code(self, code: str) -> bool:
        """Send a USSD code (e.g. '*100#')"""
        return self.do_check_ok("api/ussd/send", [
            ("content", code),
            ("codeType", "CodeType"),
            ("timeout", ""),
        ])

    def ussd_content(self) -> str:
        """Retrieve the content buffer of the active USSD session"""
        return self.do_string("api/ussd/get", None, "content")

    def ussd_release(self) -> bool:
        """Release the active USSD session"""
        return self.do_check_ok("api/ussd/release")

    # ========================================================================
    # Utility Methods
    # ========================================================================

    def get_all_info(self) -> Dict[str, Any]:
        """
        Query the main read endpoints and return them together

        Endpoints the firmware does not support (device error 100002 and
        similar) are reported as {'error': ...} instead of aborting the
        whole query; any other failure is raised.

        Returns:
            Dict with data from all endpoints
        """
        info = {}

        endpoints = [
            ('device', self.device_info),
            ('signal', self.signal_info),
            ('status', self.status_info),
            ('network', self.network_info),
            ('traffic', self.traffic_statistics),
            ('sms_count', self.sms_count),
        ]

        for name, method in endpoints:
            try:
                info[name] = method()
            except DeviceError as e:
                info[name] = {'error': str(e), 'code': e.code}

        return info
