"""
Network package: the memoized request engine and its collaborators.

- transport: RequestSpec and the default httpx-backed transport
- memo: single-flight response memo shared across clones
- broadcast: process-wide error side channel
- http: the Http request engine
"""

from .broadcast import ErrorBroadcast
from .http import (
    Http,
    HttpErrorMessage,
    HttpResponseWithHeaders,
    HttpWithResponseHeaders,
    ResponseError,
    create_method,
    get_http_with_response_headers,
)
from .memo import ResponseMemo
from .transport import HttpxTransport, RequestSpec, Transport
