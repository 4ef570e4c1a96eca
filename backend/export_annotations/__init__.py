"""
白板标注导出系统 - 后端核心模块

模块结构：
- config/     运行期配置加载
- models/     数据模型定义（任务描述/场景/页面/标注记录）
- geometry/   几何引擎（圆弧拟合/手绘笔迹/多边形/样式解析）
- shapes/     标注形状模型（箭头/线/手绘/高亮/几何图形/便签/文本）
- render/     场景渲染（排序/分组/叠加到幻灯片背景）
- external/   外部工具封装（pdftocairo/cairosvg/ghostscript/pandoc）
- messaging/  共享存储与发布订阅通道
- pipeline/   三阶段流水线（Collector → Process → Notifier）
"""

__version__ = "0.1.0"
