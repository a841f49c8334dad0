"""
EasyApply - batch job-application form filler.

单用户、单浏览器会话的批量填表工具包。
"""

from __future__ import annotations

from dotenv import find_dotenv, load_dotenv

# Load the project .env once on package import so EASYAPPLY_* overrides
# work without exporting them by hand.
load_dotenv(find_dotenv(usecwd=True), override=False)
