"""
工具函数
"""
import asyncio


async def wait_for(milliseconds: float) -> None:
    """挂起当前协程指定的毫秒数"""
    if milliseconds > 0:
        await asyncio.sleep(milliseconds / 1000)
