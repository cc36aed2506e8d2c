"""
todolist：单用户任务清单（HTTP/JSON 接口 + 菜单控制台 + JSON 文件持久化）
"""
