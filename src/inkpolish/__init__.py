__app_name__ = "InkPolish"
__version__ = "0.3.0"
