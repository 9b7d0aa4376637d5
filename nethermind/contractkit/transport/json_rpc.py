import asyncio
import itertools
import json
import logging
from typing import Any

import aiohttp
from aiohttp.client_exceptions import ClientConnectionError, ContentTypeError

from nethermind.contractkit.exceptions import SubscriptionEnded, TransportError
from nethermind.contractkit.types.calls import CallPayload, ExecutionException, LogRecord, RawResult
from nethermind.contractkit.utils import from_wire_hex, to_wire_hex

from .base import LogHandler

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("contractkit").getChild("transport").getChild("json_rpc")

DEFAULT_HEADERS = {"Content-Type": "application/json"}

# pylint: disable=raise-missing-from


def serialize_payload(payload: CallPayload) -> dict[str, Any]:
    """
    Converts a CallPayload into the JSON parameters of a call or transact request.  Bytes are sent as uppercase
    hex strings, and contract creation is sent with an empty target address
    """
    return {
        "Input": {"Address": to_wire_hex(payload.input_account), "Amount": payload.amount},
        "Address": "" if payload.target_address is None else to_wire_hex(payload.target_address),
        "GasLimit": payload.gas_limit,
        "Fee": payload.fee,
        "Data": to_wire_hex(payload.data),
    }


def parse_raw_result(response: dict[str, Any]) -> RawResult:
    """
    Parses the result of a call or transact request into a RawResult

    :raises TransportError: result fields are not valid hex
    """
    try:
        return_data = from_wire_hex((response.get("Result") or {}).get("Return") or "")
        contract_address = (response.get("Receipt") or {}).get("ContractAddress")
        exception = response.get("Exception")

        return RawResult(
            return_data=return_data,
            contract_address=from_wire_hex(contract_address) if contract_address else None,
            exception=ExecutionException(
                code=int(exception.get("Code", 0)),
                message=exception.get("Exception", ""),
            )
            if exception
            else None,
        )
    except (ValueError, AttributeError) as e:
        raise TransportError(f"Malformed result returned by node: {response}") from e


def parse_log_record(log: dict[str, Any]) -> LogRecord:
    """Parses a log entry from a subscription message"""
    return LogRecord(
        address=log.get("Address", ""),
        topics=list(log.get("Topics") or []),
        data=log.get("Data") or "",
    )


def _handle_rpc_error(response_json: dict[str, Any]) -> None:
    if "error" in response_json.keys():
        logger.debug(f"Error in RPC response: {response_json}")
        error = response_json["error"]
        raise TransportError(
            "Error in RPC response: " + str(error.get("message") if isinstance(error, dict) else error)
        )


class WebsocketSubscription:
    """
    Log subscription streamed over a websocket.  Closing the subscription closes the socket and session.

    Malformed messages and websocket errors are delivered to the handler as TransportErrors, and the end of the
    stream is delivered as SubscriptionEnded unless the subscription was closed by the client.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        websocket: aiohttp.ClientWebSocketResponse,
        handler: LogHandler,
    ):
        self._session = session
        self._websocket = websocket
        self._handler = handler
        self._closing = False
        self._reader = asyncio.ensure_future(self._read())

    def _deliver(self, error: Exception | None, log: LogRecord | None):
        try:
            self._handler(error, log)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("Subscription handler raised while processing a log")

    def _dispatch(self, raw: str):
        try:
            response_json = json.loads(raw)
            if "error" in response_json:
                self._deliver(TransportError(f"Subscription error: {response_json['error']}"), None)
                return
            log = ((response_json.get("params") or {}).get("result") or {}).get("Log")
            record = parse_log_record(log) if log is not None else None
        except (ValueError, TypeError, AttributeError):
            logger.debug(f"Malformed subscription message: {raw!r}")
            self._deliver(TransportError(f"Malformed subscription message: {raw[:200]}"), None)
            return

        if record is not None:
            self._deliver(None, record)

    async def _read(self):
        try:
            async for message in self._websocket:
                match message.type:
                    case aiohttp.WSMsgType.TEXT:
                        self._dispatch(message.data)
                    case aiohttp.WSMsgType.ERROR:
                        self._deliver(TransportError(f"Websocket error: {self._websocket.exception()}"), None)
                        break
        except aiohttp.ClientError as e:
            self._deliver(TransportError(f"Websocket error: {e}"), None)

        if not self._closing:
            logger.debug("Subscription stream ended by the node")
            self._deliver(SubscriptionEnded("Subscription stream ended by the node"), None)

    async def close(self) -> None:
        self._closing = True
        self._reader.cancel()
        try:
            await self._reader
        except asyncio.CancelledError:
            pass
        finally:
            await self._websocket.close()
            await self._session.close()


class JsonRpcTransport:
    """
    LedgerTransport sending JSON-RPC requests to a ledger node with aiohttp.  Calls and transactions are sent as
    HTTP POST requests, and event subscriptions are streamed over a websocket.

    The transport does not retry requests.  Timeouts are set by ``timeout``, in seconds.
    """

    call_method: str = "transact.CallTxSim"
    transact_method: str = "transact.CallTxSync"
    subscribe_method: str = "events.SubscribeLogs"

    def __init__(
        self,
        url: str,
        ws_url: str | None = None,
        headers: dict[str, str] | None = None,
        timeout: int = 120,
    ):
        self.url = url
        self.ws_url = ws_url or url.replace("http", "ws", 1)
        self.headers = headers or DEFAULT_HEADERS
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._request_ids = itertools.count(1)

    def _request(self, method: str, params: dict[str, Any]) -> dict[str, Any]:
        return {"jsonrpc": "2.0", "id": next(self._request_ids), "method": method, "params": params}

    async def _post(self, method: str, params: dict[str, Any]) -> Any:
        request = self._request(method, params)
        logger.debug(f"Sending {method} request to {self.url}")

        async with aiohttp.ClientSession(headers=self.headers, timeout=self.timeout) as session:
            try:
                async with session.post(self.url, json=request) as response:
                    try:
                        response_json = await response.json()
                    except ContentTypeError:
                        logger.error(f"Unexpected response from {self.url}.  Error Code: {response.status}")
                        raise TransportError(f"Unexpected response with status {response.status} from {self.url}")
                    except ValueError:
                        raise TransportError(f"Malformed JSON returned by {self.url}")
            except ClientConnectionError as e:
                raise TransportError(f"Could not connect to {self.url}: {e}")
            except asyncio.TimeoutError:
                raise TransportError(f"Timeout Error for RPC Host {self.url}")

        if not isinstance(response_json, dict):
            raise TransportError(f"Unexpected RPC response from {self.url}: {response_json}")
        _handle_rpc_error(response_json)
        if "result" not in response_json:
            raise TransportError(f"RPC response from {self.url} is missing a result: {response_json}")
        return response_json["result"]

    async def simulate_call(self, payload: CallPayload) -> RawResult:
        return parse_raw_result(await self._post(self.call_method, serialize_payload(payload)))

    async def submit_transaction(self, payload: CallPayload) -> RawResult:
        return parse_raw_result(await self._post(self.transact_method, serialize_payload(payload)))

    async def subscribe_events(self, address: str, signature: str, handler: LogHandler) -> WebsocketSubscription:
        session = aiohttp.ClientSession(headers=self.headers)
        try:
            websocket = await session.ws_connect(self.ws_url)
            await websocket.send_json(
                self._request(self.subscribe_method, {"Address": to_wire_hex(address), "Signature": signature})
            )
        except aiohttp.ClientError as e:
            await session.close()
            raise TransportError(f"Could not subscribe to logs at {self.ws_url}: {e}")

        return WebsocketSubscription(session, websocket, handler)
