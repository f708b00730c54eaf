"""Machine record returned by IaaS providers."""

from dataclasses import asdict, dataclass, field


@dataclass
class Machine:
    """A provisioned machine as reported back to the host platform.

    ``creation_params`` holds the resolved request (including ``region``) and
    must be kept by the caller; providers need it again to delete the machine.
    """

    id: str
    status: str = ""
    address: str = ""
    creation_params: dict[str, str] = field(default_factory=dict)
    iaas: str = ""

    def to_dict(self) -> dict:
        return asdict(self)
