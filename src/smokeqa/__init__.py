"""
smokeqa - 手游冒烟测试自动化

ADB 驱动设备，模板匹配识别 Unity 画面，按阶段执行首启/登录/登出流程，
结果截图留证并写入 Google 表格。
"""

__version__ = "0.3.0"
