"""ORM 工具函数"""

import re


def to_snake_case(name: str) -> str:
    """驼峰命名转下划线命名（支持连续大写缩写如 API、URL）

    Examples:
        >>> to_snake_case("MenuItem")
        'menu_item'
        >>> to_snake_case("APIBanner")
        'api_banner'
    """
    # 连续大写后跟大写+小写：APIBanner → API_Banner
    result = re.sub(r'([A-Z\d]+)([A-Z][a-z])', r'\1_\2', name)
    # 小写字母后跟大写：menuItem → menu_Item
    result = re.sub(r'([a-z])([A-Z])', r'\1_\2', result)
    return result.lower()


__all__ = ["to_snake_case"]
