"""Prism Engine 命令行脚本。"""
