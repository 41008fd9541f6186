"""
Run a regtest/dev electrs process against a running node, for integration tests.
"""

from electrsd.conf import Conf
from electrsd.config import Settings
from electrsd.data_dir import DataDir, Persistent, Temporary
from electrsd.electrsd import ElectrsD
from electrsd.electrum import ElectrumClient, GetHistoryRes, HeaderNotification
from electrsd.errors import (
    BothDirsSpecified,
    BothEnvVars,
    EarlyExit,
    ElectrsdError,
    ElectrumClientError,
    MissingP2PSocket,
    NoElectrsExecutableFound,
    NodeRpcError,
    SignalError,
    SpawnError,
    TransactionDecodeError,
)
from electrsd.exe import downloaded_exe_path, exe_path
from electrsd.node import AttachedNode, NodeParams, NodeRpcClient, UpstreamNode

__all__ = [
    "AttachedNode",
    "BothDirsSpecified",
    "BothEnvVars",
    "Conf",
    "DataDir",
    "EarlyExit",
    "ElectrsD",
    "ElectrsdError",
    "ElectrumClient",
    "ElectrumClientError",
    "GetHistoryRes",
    "HeaderNotification",
    "MissingP2PSocket",
    "NoElectrsExecutableFound",
    "NodeParams",
    "NodeRpcClient",
    "NodeRpcError",
    "Persistent",
    "Settings",
    "SignalError",
    "SpawnError",
    "Temporary",
    "TransactionDecodeError",
    "UpstreamNode",
    "downloaded_exe_path",
    "exe_path",
]
