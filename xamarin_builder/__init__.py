"""Xamarin Builder - build orchestration for multi-project Xamarin solutions.

This package decides which mdtool/xbuild invocations a solution needs for
its iOS, tvOS, macOS and Android projects, runs them once each, and
locates the produced archives and packages afterwards.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
