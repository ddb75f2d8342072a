"""compute-firewall - async handles for Compute Engine firewall rules.

Example:

    from compute_firewall import Compute, Ok, Err

    async with Compute.from_config() as compute:
        firewall = compute.firewall("tcp-3000")

        match await firewall.set_metadata({"sourceRanges": ["10.0.0.0/8"]}):
            case Ok(operation=op):
                await op.wait()
            case Err(error=err):
                print(f"update failed: {err}")
"""

from compute_firewall.compute import Compute, build_firewall_body
from compute_firewall.config import (
    ComputeConfig,
    load_config,
    resolve_compute_config,
    resolve_log_config,
)
from compute_firewall.core.exceptions import (
    ComputeFirewallError,
    ConfigurationError,
    OperationError,
    OperationTimeoutError,
)
from compute_firewall.firewall import DEFAULT_NETWORK, FirewallResource
from compute_firewall.infra.http import BearerAuth, GoogleAuth, HttpClient, HttpError
from compute_firewall.observability.logging import LogConfig, setup_logging, teardown_logging
from compute_firewall.operation import Operation
from compute_firewall.result import Callback, Err, Ok, OperationResult
from compute_firewall.service import RestResource

__all__ = [
    "DEFAULT_NETWORK",
    "BearerAuth",
    "Callback",
    "Compute",
    "ComputeConfig",
    "ComputeFirewallError",
    "ConfigurationError",
    "Err",
    "FirewallResource",
    "GoogleAuth",
    "HttpClient",
    "HttpError",
    "LogConfig",
    "Ok",
    "Operation",
    "OperationError",
    "OperationResult",
    "OperationTimeoutError",
    "RestResource",
    "build_firewall_body",
    "load_config",
    "resolve_compute_config",
    "resolve_log_config",
    "setup_logging",
    "teardown_logging",
]
