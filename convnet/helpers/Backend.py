# convnet/helpers/Backend.py
import logging
import os

import numpy as np

logger = logging.getLogger(__name__)

try:
    import cupy as cp
    # Quick runtime check
    try:
        _ = (cp.array([1, 2, 3]) + 1).sum()
        CUPY_AVAILABLE = True
    except Exception as e:
        logger.warning("CuPy installed but CUDA runtime error: %s; using NumPy", e)
        cp = None
        CUPY_AVAILABLE = False
except ImportError:
    cp = None
    CUPY_AVAILABLE = False


class Backend:
    """Backend abstraction for NumPy/CuPy compatibility."""
    def __init__(self, use_gpu=True, default_float=np.float64):
        self.use_gpu = bool(use_gpu and CUPY_AVAILABLE)
        self.default_float = default_float
        self.xp = cp if self.use_gpu else np
        logger.info("Using %s backend", "GPU (CuPy)" if self.use_gpu else "CPU (NumPy)")

    # -------- device transfer --------
    def to_cpu(self, x):
        """Move array to CPU (NumPy)."""
        if self.use_gpu and x is not None:
            return cp.asnumpy(x)
        return x

    def ensure_array(self, x, dtype=None):
        """
        Ensure 'x' is an array of the current backend.
        Accepts list/tuple/np/cp arrays; returns xp.ndarray.
        """
        if self.use_gpu and isinstance(x, np.ndarray):
            x = cp.asarray(x)
        elif (not self.use_gpu) and (cp is not None) and isinstance(x, cp.ndarray):
            x = cp.asnumpy(x)
        arr = self.xp.asarray(x)
        if dtype is not None and arr.dtype != dtype:
            arr = arr.astype(dtype)
        return arr

    # -------- array creation --------
    def zeros(self, *args, **kwargs):
        kwargs.setdefault("dtype", self.default_float)
        return self.xp.zeros(*args, **kwargs)

    def full(self, shape, value, **kwargs):
        kwargs.setdefault("dtype", self.default_float)
        return self.xp.full(shape, value, **kwargs)

    def randn(self, *shape):
        return self.xp.random.randn(*shape).astype(self.default_float)

    # -------- math (thin wrappers) --------
    def sum(self, x, axis=None, keepdims=False):  return self.xp.sum(x, axis=axis, keepdims=keepdims)
    def einsum(self, subscripts, *operands):       return self.xp.einsum(subscripts, *operands)
    def sign(self, x):                             return self.xp.sign(x)

    # -------- sliding window (conv helper) --------
    def sliding_window_view(self, x, window_shape, axis=None):
        """
        Device-aware read-only sliding_window_view.
        Falls back to a CPU view (copied back to the device) when xp lacks it.
        """
        stride_tricks = getattr(self.xp.lib, "stride_tricks", None)
        if stride_tricks is not None and hasattr(stride_tricks, "sliding_window_view"):
            return stride_tricks.sliding_window_view(x, window_shape, axis=axis)
        v = np.lib.stride_tricks.sliding_window_view(self.to_cpu(x), window_shape, axis=axis)
        return self.ensure_array(v)

    # -------- randomness / padding --------
    @property
    def random(self):
        return self.xp.random

    def seed(self, seed=42):
        """Seed RNG for reproducibility."""
        if self.use_gpu:
            cp.random.seed(seed)
        np.random.seed(seed)

    def pad(self, array, pad_width, mode="constant", **kwargs):
        return self.xp.pad(array, pad_width, mode=mode, **kwargs)

    # -------- delegate unknown attrs to xp --------
    def __getattr__(self, name):
        return getattr(self.xp, name)


def _env_flag(name, default):
    return os.environ.get(name, default).strip().lower() not in ("0", "false", "no", "off", "")


# Global backend instance, decided once per process
backend = Backend(use_gpu=_env_flag("CONVNET_USE_GPU", "1"))
