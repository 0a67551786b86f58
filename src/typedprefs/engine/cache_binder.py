# src/typedprefs/engine/cache_binder.py
"""CacheBinder: optional LRU layer in front of the store.

Getter reads go through the cache (a hit is returned as-is, a miss reads the
store and populates the cache with non-None values). Putters write the store
first, then either evict the key (EVICT) or replace the cached value
(UPDATE). The cache is authoritative until ``reset_cache``, ``remove`` or
``clear`` touches it; writes made directly to the store are not observed.
"""

from __future__ import annotations

import structlog

from typedprefs.contracts.declarations import InterfaceDecl, MethodDecl
from typedprefs.contracts.descriptors import CacheConfig, SettingDescriptor
from typedprefs.contracts.enums import CacheWriteMode, DiagnosticCode
from typedprefs.contracts.keys import SettingKey
from typedprefs.engine.accessors import key_literal
from typedprefs.engine.context import GenerationContext

logger = structlog.get_logger(__name__)


class CacheBinder:
    """Resolve cache configuration and decorate accessor bodies."""

    def configure(
        self,
        interface: InterfaceDecl,
        context: GenerationContext,
        method_directives: list[tuple[SettingKey, MethodDecl]],
    ) -> CacheConfig | None:
        """Decide whether and how the unit caches.

        Args:
            interface: Top-level interface carrying the ``@cached`` directive
            context: Generation context holding the classified getters
            method_directives: Methods that carry their own ``@cached``

        Returns:
            CacheConfig, or None when caching is off
        """
        directive = interface.cache
        if directive is None:
            for _, method in method_directives:
                context.warning(
                    f"@cached on '{method.name}' has no effect: '{interface.name}' is not cached",
                    method.location,
                    DiagnosticCode.CONFIGURATION,
                )
            return None

        store = interface.store
        if store is None or store.uses_default_store:
            context.error(
                f"Caching on '{interface.name}' requires a named store: "
                "the default store is shared and may change without notice",
                interface.location,
                DiagnosticCode.CONFIGURATION,
            )
            return None

        auto_sized = directive.cache_size is None
        max_entries = len(context.getter_keys) if auto_sized else directive.cache_size
        assert max_entries is not None

        overrides: list[tuple[SettingKey, CacheWriteMode]] = []
        for key, method in method_directives:
            assert method.cache is not None
            if any(existing == key for existing, _ in overrides):
                continue
            mode = method.cache.write_mode
            if mode is not directive.write_mode:
                overrides.append((key, mode))

        config = CacheConfig(
            max_entries=max_entries,
            write_mode=directive.write_mode,
            auto_sized=auto_sized,
            overrides=tuple(overrides),
        )
        logger.debug(
            "Cache configured",
            interface=interface.qualified_name,
            max_entries=max_entries,
            auto_sized=auto_sized,
            write_mode=config.write_mode.value,
        )
        return config

    def constructor_lines(self, config: CacheConfig) -> list[str]:
        return [f"self._cache = LruCache({config.max_entries})"]

    def getter_body(self, getter: SettingDescriptor, read_lines: list[str]) -> list[str]:
        key = key_literal(getter)
        return [
            f"cached = self._cache.get({key})",
            "if cached is not None:",
            "    return cached",
            *read_lines,
            "if result is not None:",
            f"    self._cache.put({key}, result)",
            "return result",
        ]

    def after_put_lines(self, putter: SettingDescriptor, config: CacheConfig) -> list[str]:
        key = key_literal(putter)
        if config.mode_for(putter.key) is CacheWriteMode.EVICT:
            return [f"self._cache.remove({key})"]
        return [
            f"if {putter.param_name} is None:",
            f"    self._cache.remove({key})",
            "else:",
            f"    self._cache.put({key}, {putter.param_name})",
        ]

    def remove_lines(self) -> list[str]:
        return ["self._cache.remove(key)"]

    def clear_lines(self) -> list[str]:
        return ["self._cache.evict_all()"]

    def clear_defined_lines(self, keys: tuple[SettingKey, ...]) -> list[str]:
        return [f"self._cache.remove({key.name!r})" for key in keys]

    def reset_cache_body(self) -> list[str]:
        return ["self._cache.evict_all()"]
