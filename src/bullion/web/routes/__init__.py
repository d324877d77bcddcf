"""
路由模块
"""
