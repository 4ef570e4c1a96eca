import argparse
import sys
from pathlib import Path


def _add_backend_to_path() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    backend_root = repo_root / "backend"
    if str(backend_root) not in sys.path:
        sys.path.insert(0, str(backend_root))


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Render whiteboard scene pages to overlay SVGs (no pipeline, no external tools)."
    )
    parser.add_argument("scene", help="场景文件（whiteboard JSON）")
    parser.add_argument(
        "--out-dir",
        default="test/_overlay_out",
        help="输出目录（默认：test/_overlay_out）",
    )
    parser.add_argument("--width", type=float, default=1440, help="画布宽度（默认：1440）")
    parser.add_argument("--height", type=float, default=1080, help="画布高度（默认：1080）")
    args = parser.parse_args()

    _add_backend_to_path()
    from xml.etree import ElementTree as ET

    from export_annotations.models import Scene  # type: ignore
    from export_annotations.render import SceneRenderer, serialize_svg  # type: ignore
    from export_annotations.render.slide import SVG_NS  # type: ignore

    scene_path = Path(args.scene)
    if not scene_path.exists():
        print(f"场景文件不存在: {scene_path}")
        return 1

    scene = Scene.model_validate_json(scene_path.read_bytes())
    if not scene.pages:
        print("场景中没有页面")
        return 1

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    renderer = SceneRenderer()
    for page in scene.pages:
        root = ET.Element("svg", {
            "xmlns": SVG_NS,
            "width": str(args.width),
            "height": str(args.height),
        })
        overlay = renderer.render_page(page)
        root.append(overlay)
        out_path = out_dir / f"overlay-slide{page.page}.svg"
        out_path.write_text(serialize_svg(root), encoding="utf-8")
        print(f"slide{page.page}: annotations={len(page.annotations)} shapes={len(overlay)} -> {out_path}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
