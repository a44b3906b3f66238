"""Fashion Forecast web service.

Lets administrators curate clothing styles and shows visitors photos
matched to their chosen styles and the current weather in their city.
"""

__version__ = "1.0.0"
