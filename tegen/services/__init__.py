"""服务层：项目初始化、构建运行与组件装配"""
