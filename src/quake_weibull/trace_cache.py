"""
Quake Weibull - Posterior Trace Cache
=====================================
Opt-in on-disk cache of posterior draws, so re-running an analysis on the
same data with the same model and sampler settings skips MCMC.

Nothing is cached implicitly: a ``TraceCache`` must be created and handed to
``WeibullAnalysis`` (or used directly) by the caller.

Features:
- MD5 keys over data bytes, declared priors and sampler configuration
- NetCDF storage through ArviZ
- LRU eviction when the cache exceeds its size limit
- Hit/miss statistics

Usage:
    from quake_weibull.trace_cache import TraceCache

    cache = TraceCache(cache_dir='.cache/traces', max_size_mb=200)
    draws = cache.get(gaps, spec, config)      # None on a miss
    if draws is None:
        draws = backend.sample(data, config)
        cache.put(gaps, spec, config, draws)
    print(cache.stats())
"""

import hashlib
import os
from pathlib import Path
from typing import Dict, Optional
import warnings

import numpy as np
import arviz as az

from .model import WeibullModelSpec
from .sampling import PosteriorDraws, SamplerConfig


class TraceCache:
    """LRU cache of posterior draws stored as NetCDF files."""

    def __init__(self, cache_dir: str = '.cache/traces',
                 max_size_mb: int = 200,
                 verbose: bool = True):
        """
        Args:
            cache_dir: Directory to store cached traces
            max_size_mb: Maximum cache size in megabytes
            verbose: Report hits and stores
        """
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.max_size_mb = max_size_mb
        self.verbose = verbose
        self.hits = 0
        self.misses = 0

    def _get_cache_key(self, x, spec: WeibullModelSpec,
                       config: SamplerConfig) -> str:
        """MD5 over the observations, the priors and the sampler settings."""
        digest = hashlib.md5()
        digest.update(np.ascontiguousarray(x, dtype=np.float64).tobytes())
        digest.update(spec.key().encode())
        digest.update(config.key().encode())
        return digest.hexdigest()

    def _path(self, key: str) -> Path:
        return self.cache_dir / f"{key}.nc"

    def get(self, x, spec: WeibullModelSpec,
            config: SamplerConfig) -> Optional[PosteriorDraws]:
        """Cached draws for this data/model/config, or None."""
        cache_file = self._path(self._get_cache_key(x, spec, config))

        if not cache_file.exists():
            self.misses += 1
            return None

        try:
            idata = az.from_netcdf(str(cache_file))
            draws = PosteriorDraws.from_inference_data(idata, var_names=spec.parameter_names)
        except (OSError, ValueError, KeyError) as e:
            warnings.warn(f"Discarding unreadable cache entry {cache_file.name}: {e}")
            cache_file.unlink()
            self.misses += 1
            return None

        # Update access time (for LRU)
        os.utime(cache_file, None)
        self.hits += 1
        if self.verbose:
            print(f"[Cache] Hit: {cache_file.name}")
        return draws

    def put(self, x, spec: WeibullModelSpec, config: SamplerConfig,
            draws: PosteriorDraws):
        """Store draws, then evict old entries if over the size limit."""
        cache_file = self._path(self._get_cache_key(x, spec, config))
        draws.to_inference_data().to_netcdf(str(cache_file))
        if self.verbose:
            print(f"[Cache] Stored: {cache_file.name}")

        self._cleanup_if_needed()

    def _entries(self):
        return list(self.cache_dir.glob('*.nc'))

    def _cleanup_if_needed(self):
        """Remove least recently used entries until under the size limit."""
        limit = self.max_size_mb * 1024 * 1024
        files = sorted(self._entries(), key=lambda f: f.stat().st_atime)
        total_size = sum(f.stat().st_size for f in files)

        while files and total_size > limit:
            oldest = files.pop(0)
            total_size -= oldest.stat().st_size
            oldest.unlink()

    def clear(self):
        """Clear entire cache and reset statistics."""
        for f in self._entries():
            f.unlink()
        self.hits = 0
        self.misses = 0

    def stats(self) -> Dict[str, float]:
        """
        Return cache statistics.

        Returns:
            Dictionary with hits, misses, hit_rate, size_mb, num_entries
        """
        entries = self._entries()
        total_size = sum(f.stat().st_size for f in entries)
        total_requests = self.hits + self.misses

        return {
            'hits': self.hits,
            'misses': self.misses,
            'hit_rate': self.hits / total_requests if total_requests > 0 else 0.0,
            'size_mb': total_size / (1024 * 1024),
            'num_entries': len(entries),
        }
