"""
CAD 图纸解析系统 - 后端核心模块

模块结构：
- config/     运行期配置与日志
- models/     数据模型定义（几何/实体/图层/解析结果/文件状态）
- dxf/        DXF 解析（分组码切分/段状态机/实体解码/图层聚合）
- pipeline/   解析流水线与任务编排（单飞/后台执行/结果提交）
- storage/    原始内容读取与解析结果持久化
"""

__version__ = "0.1.0"
