"""
Setup file.
"""

from setuptools import setup

URL = "https://github.com/yugabyte/ybuild"
KEYWORDS = "build cmake make orchestration native c++ thirdparty ccache maven"


if __name__ == "__main__":
    setup(
        keywords=KEYWORDS,
        url=URL,
        include_package_data=True)
