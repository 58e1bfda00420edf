"""Compute device probing for the optional torch backend."""

from dataclasses import dataclass

TORCH_AVAILABLE = False

try:
    import torch
    TORCH_AVAILABLE = True
except ImportError:
    torch = None


@dataclass(frozen=True)
class DeviceInfo:
    device: str
    gpu_name: str | None
    reason: str

    @property
    def accelerated(self) -> bool:
        return self.device == "cuda"

    def describe(self) -> str:
        if self.accelerated and self.gpu_name:
            return f"{self.gpu_name} (CUDA)"
        return f"CPU ({self.reason})"


def detect_device() -> DeviceInfo:
    """Pick the device torch kernels should run on."""
    if not TORCH_AVAILABLE:
        return DeviceInfo("cpu", None, "PyTorch not installed")
    
    try:
        if torch.cuda.is_available():
            return DeviceInfo("cuda", torch.cuda.get_device_name(0), "CUDA GPU detected")
        return DeviceInfo("cpu", None, "No CUDA GPU available")
    except RuntimeError as e:
        return DeviceInfo("cpu", None, f"CUDA detection failed: {e}")
