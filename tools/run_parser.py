import argparse
import sys
from pathlib import Path


def _collect_inputs(dxf_dir: Path, pattern: str) -> list[Path]:
    return sorted(dxf_dir.glob(pattern))


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Run DXF parser on local samples."
    )
    parser.add_argument(
        "--dxf-dir",
        required=True,
        help="DXF目录",
    )
    parser.add_argument(
        "--pattern",
        default="*.dxf",
        help="文件匹配模式（默认：*.dxf）",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="逐图层输出实体数量与边界框",
    )
    args = parser.parse_args()

    from cad_ingest.dxf import ContentDecoder, DxfParser

    decoder = ContentDecoder()
    dxf_parser = DxfParser()

    inputs = _collect_inputs(Path(args.dxf_dir), args.pattern)
    if not inputs:
        print("未找到可处理文件")
        return 1

    failed = 0
    for path in inputs:
        try:
            drawing = dxf_parser.parse(decoder.decode(path.read_bytes()))
        except Exception as exc:  # noqa: BLE001
            failed += 1
            print(f"{path.name}: ERROR {exc}")
            continue

        result = drawing.result
        print(
            f"{path.name}: entities={len(result.entities)} layers={result.layers} "
            f"unsupported={result.unsupported_entity_types}"
        )
        if args.verbose:
            for layer in drawing.layers:
                print(f"  {layer.name}: entities={len(layer.entities)} bbox={layer.bounding_box}")

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
