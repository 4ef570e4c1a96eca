"""
幻灯片合成 - 背景图 + 标注叠加层 → 完整 SVG

职责：
1. 探测背景尺寸（位图用 Pillow，SVG 读取 width/height 或 viewBox）
2. 等比缩放到配置的最大画布内（只限制中间渲染分辨率）
3. 生成根 <svg>：背景 <image> + 叠加层
4. 将像素尺寸换算为打印尺寸，供 SVG→PDF 转换使用
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from xml.etree import ElementTree as ET

from PIL import Image, UnidentifiedImageError

from ..geometry.vec import fmt_num

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

_LENGTH_RE = re.compile(r"^\s*([0-9]*\.?[0-9]+(?:[eE][-+]?[0-9]+)?)")


class ProbeError(ValueError):
    """背景尺寸无法探测"""


@dataclass(frozen=True)
class SlideSize:
    width: float
    height: float


def _parse_length(value: str | None) -> float | None:
    if not value or value.strip().endswith("%"):
        return None
    match = _LENGTH_RE.match(value)
    return float(match.group(1)) if match else None


def _probe_svg(path: Path) -> SlideSize:
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as e:
        raise ProbeError(f"SVG解析失败: {path}: {e}") from e

    width = _parse_length(root.get("width"))
    height = _parse_length(root.get("height"))
    if width and height:
        return SlideSize(width, height)

    view_box = (root.get("viewBox") or "").replace(",", " ").split()
    if len(view_box) == 4:
        try:
            _, _, vb_w, vb_h = (float(v) for v in view_box)
        except ValueError:
            vb_w = vb_h = 0
        if vb_w > 0 and vb_h > 0:
            return SlideSize(vb_w, vb_h)

    raise ProbeError(f"SVG缺少尺寸信息: {path}")


def probe_dimensions(path: Path) -> SlideSize:
    """
    探测背景像素尺寸

    Raises:
        ProbeError: 文件不存在或格式无法识别
    """
    path = Path(path)
    if not path.exists():
        raise ProbeError(f"背景文件不存在: {path}")

    if path.suffix.lower() == ".svg":
        return _probe_svg(path)

    try:
        with Image.open(path) as img:
            width, height = img.size
    except (UnidentifiedImageError, OSError) as e:
        raise ProbeError(f"无法识别的背景图片: {path}: {e}") from e

    if width <= 0 or height <= 0:
        raise ProbeError(f"背景图片尺寸非法: {path}")
    return SlideSize(float(width), float(height))


def fit_to_box(size: SlideSize, max_width: float, max_height: float) -> SlideSize:
    """等比缩放到 max_width × max_height 内（可放大）"""
    ratio = min(max_width / size.width, max_height / size.height)
    return SlideSize(size.width * ratio, size.height * ratio)


def to_print_size(pixels: float, points_per_inch: float, pixels_per_inch: float) -> float:
    """像素尺寸 → SVG→PDF 输出尺寸"""
    return (pixels / points_per_inch) * pixels_per_inch


def build_slide_svg(background: Path, size: SlideSize, overlay: ET.Element) -> ET.Element:
    """背景图 + 叠加层 → 根 <svg>"""
    width, height = fmt_num(size.width), fmt_num(size.height)
    root = ET.Element("svg", {
        "xmlns": SVG_NS,
        "xmlns:xlink": XLINK_NS,
        "width": width,
        "height": height,
    })
    ET.SubElement(root, "image", {
        "xlink:href": f"file://{Path(background).resolve()}",
        "width": width,
        "height": height,
    })
    root.append(overlay)
    return root


def serialize_svg(root: ET.Element) -> str:
    return ET.tostring(root, encoding="unicode")


def write_slide_svg(root: ET.Element, path: Path) -> Path:
    path = Path(path)
    path.write_text(serialize_svg(root), encoding="utf-8")
    return path
