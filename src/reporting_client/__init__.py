from .batch import BatchCollector as BatchCollector
from .bulk import Call as Call
from .bulk import CallResult as CallResult
from .caller import Caller as Caller
from .client import BatchRequest as BatchRequest
from .client import ReportingClient as ReportingClient
from .codec import encode_params as encode_params
from .config import ClientConfig as ClientConfig
from .exceptions import API_ERROR_PREFIX as API_ERROR_PREFIX
from .exceptions import EnvelopeShapeError as EnvelopeShapeError
from .exceptions import ParameterEncodingError as ParameterEncodingError
from .exceptions import RemoteAPIError as RemoteAPIError
from .exceptions import ReportingAPIError as ReportingAPIError
from .exceptions import ReportingClientError as ReportingClientError
from .exceptions import TransportError as TransportError
from .transport import RawResponse as RawResponse
from .transport import TransportClient as TransportClient

__all__ = [
    "API_ERROR_PREFIX",
    "BatchCollector",
    "BatchRequest",
    "Call",
    "CallResult",
    "Caller",
    "ClientConfig",
    "EnvelopeShapeError",
    "ParameterEncodingError",
    "RawResponse",
    "RemoteAPIError",
    "ReportingAPIError",
    "ReportingClient",
    "ReportingClientError",
    "TransportClient",
    "TransportError",
    "encode_params",
]
