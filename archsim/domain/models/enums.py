from enum import Enum
from typing import Optional


class NodeKind(str, Enum):
    """Kind of a diagram node. Only ARCHITECTURE nodes take part in simulation."""
    ARCHITECTURE = "architecture"
    GROUP = "group"
    COMMENT = "comment"


class EdgeProtocol(str, Enum):
    HTTP = "http"
    HTTPS = "https"
    GRPC = "grpc"
    WEBSOCKET = "websocket"
    TCP = "tcp"
    UDP = "udp"
    AMQP = "amqp"
    KAFKA = "kafka"
    RABBITMQ = "rabbitmq"

    @property
    def request_response(self) -> bool:
        """Whether a reply travels back over the same edge."""
        return self not in (EdgeProtocol.AMQP, EdgeProtocol.KAFKA, EdgeProtocol.RABBITMQ)

    @classmethod
    def is_request_response(cls, protocol: Optional[str]) -> bool:
        """Edges without a protocol are HTTP; unknown protocols count as request/response."""
        try:
            return cls(protocol or cls.HTTP.value).request_response
        except ValueError:
            return True


class SimulationMode(str, Enum):
    IDLE = "idle"
    FLOW = "flow"
    FAILURE = "failure"
    CHAOS = "chaos"


class ChaosSubMode(str, Enum):
    RANDOM_FAILURE = "random-failure"
    NETWORK_PARTITION = "network-partition"


class ChaosEventType(str, Enum):
    NODE_FAILURE = "node-failure"
    CASCADE = "cascade"
    PARTITION = "partition"
    RECOVERY = "recovery"


class RejectionReason(str, Enum):
    """Why an orchestrator call ended up as a no-op."""
    INVALID_SOURCE = "invalid-source"            # flow start without a usable source
    EMPTY_FAILURE_SET = "empty-failure-set"      # failure start with nothing marked
    DEGENERATE_GRAPH = "degenerate-graph"        # partition with <2 nodes or no severable edge
    STALE_TIMER = "stale-timer"                  # chaos tick from a stopped session
    NO_ELIGIBLE_TARGETS = "no-eligible-targets"  # every node protected or already failed
    UNKNOWN_NODE = "unknown-node"                # id is not an architecture node of the snapshot
    WRONG_MODE = "wrong-mode"                    # call not meaningful in the current mode
    NOTHING_TO_RESUME = "nothing-to-resume"      # resume without a computed result
