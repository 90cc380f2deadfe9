"""
JAX Configuration - MUST be imported before any JAX imports.

This module sets environment variables for JAX configuration including:
- Persistent compilation cache directory
- Minimum compile time threshold for caching
- Quiet XLA C++ logging

Precision (float32 vs float64) is switched per run by
mcmc.config.configure_precision, not here.
"""
import os
from pathlib import Path

# --- XLA LOGGING ---
# Suppress CUDA/XLA C++ warnings; does not affect JAX compilation messages
os.environ.setdefault('TF_CPP_MIN_LOG_LEVEL', '2')

# --- PERSISTENT COMPILATION CACHE ---
# Enables cross-session caching of compiled kernels
_JAX_CACHE_DIR = Path.home() / ".cache" / "jax" / "mhlab_cache"
os.environ.setdefault("JAX_COMPILATION_CACHE_DIR", str(_JAX_CACHE_DIR))
os.environ.setdefault("JAX_PERSISTENT_CACHE_MIN_COMPILE_TIME_SECS", "1.0")
