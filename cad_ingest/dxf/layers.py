"""
图层注册表 - 按图层名聚合实体

职责：
1. 保证默认图层 "0" 始终存在
2. 实体引用了未声明的图层时按默认样式惰性创建
3. 逐个实体合并图层边界框

每次解析独立持有一个实例，不跨解析共享。
"""

from __future__ import annotations

from ..models import DEFAULT_LAYER, LayerInfo, ParsedEntity, ParsedLayer


class LayerRegistry:
    """图层名 → ParsedLayer"""

    def __init__(self) -> None:
        self._layers: dict[str, ParsedLayer] = {}
        self._ensure(DEFAULT_LAYER)

    def __contains__(self, name: str) -> bool:
        return name in self._layers

    def __len__(self) -> int:
        return len(self._layers)

    def declare(self, info: LayerInfo) -> ParsedLayer:
        """登记图层表中的图层（已存在则更新样式，保留实体）"""
        layer = self._layers.get(info.name)
        if layer is None:
            layer = ParsedLayer(info=info)
            self._layers[info.name] = layer
        else:
            layer.info = info
        return layer

    def add(self, entity: ParsedEntity) -> ParsedLayer:
        """将实体归入其图层"""
        layer = self._ensure(entity.layer)
        layer.add_entity(entity)
        return layer

    def get(self, name: str) -> ParsedLayer | None:
        return self._layers.get(name)

    def layers(self) -> list[ParsedLayer]:
        """全部图层（按名称排序）"""
        return [self._layers[name] for name in sorted(self._layers)]

    def _ensure(self, name: str) -> ParsedLayer:
        layer = self._layers.get(name)
        if layer is None:
            layer = ParsedLayer(info=LayerInfo.default(name))
            self._layers[name] = layer
        return layer
