"""
Centralized site configuration.
Edit this file to update the texts and links displayed on the page.
"""

SITE_CONFIG = {
    "title":   "DocuStitch AI",
    "tagline": "Turn a documentation site into one PDF, straight from the cloud",
    # Static filename label shown above the generated script (also used for downloads)
    "script_filename": "colab_script.py",
    # Opens a fresh Google Colab notebook where the script is pasted and run
    "colab_url": "https://colab.research.google.com/#create=true",
    # Ordered list of preprocessor module names applied to every screenshot
    "preprocessors": ["resize"],
    "footer_tagline": (
        "No local Python needed: paste the generated code into Google Colab, "
        "press play, and the merged PDF downloads automatically."
    ),
    "footer_model_note": (
        "Scripts are written by a generative AI model. "
        "Review them before running, and expect results to vary between sites."
    ),
}

# Progress messages shown on the submit button while a request is running
STATE_MESSAGES = {
    "analyzing":  "Analyzing the page structure...",
    "generating": "Writing the Google Colab script...",
}
