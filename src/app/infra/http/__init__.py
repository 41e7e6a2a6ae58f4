"""Motor HTTP do SDK: flattening, montagem, política de transporte,
execução resiliente e decodificação de respostas."""

from .assembler import DEFAULT_USER_AGENT, RequestAssembler, build_url
from .executor import ResilientExecutor, classify_transport_error, is_certificate_error
from .params import FieldSpec, ParamSet, Placement, Shape, dump_json, flatten_params
from .request import (
    FORM,
    HTTP,
    HTTPS,
    JSON,
    RAW,
    XML,
    BaseRequest,
    PreparedRequest,
    RequestOption,
    with_request_base_url,
    with_request_header,
    with_request_insecure,
    with_request_timeout,
)
from .response import HttpResponse, unmarshal_response
from .transport import TransportPolicy, bypasses_proxy, resolve_transport_policy

__all__ = [
    "DEFAULT_USER_AGENT",
    "FORM",
    "HTTP",
    "HTTPS",
    "JSON",
    "RAW",
    "XML",
    "BaseRequest",
    "FieldSpec",
    "HttpResponse",
    "ParamSet",
    "Placement",
    "PreparedRequest",
    "RequestAssembler",
    "RequestOption",
    "ResilientExecutor",
    "Shape",
    "TransportPolicy",
    "build_url",
    "bypasses_proxy",
    "classify_transport_error",
    "dump_json",
    "flatten_params",
    "is_certificate_error",
    "resolve_transport_policy",
    "unmarshal_response",
    "with_request_base_url",
    "with_request_header",
    "with_request_insecure",
    "with_request_timeout",
]
