"""
Prompt sent alongside the screenshot.

The model is asked for a Google Colab script that crawls the documentation
sidebar, prints every page to PDF with sticky/fixed elements removed, and
merges the pages into a single download.
"""

_INSTALL_CELL = (
    "    ```python\n"
    "    # @title 1. Install dependencies (press the play button on the left)\n"
    "    !pip install playwright pypdf nest_asyncio\n"
    "    !playwright install chromium\n"
    "    !playwright install-deps\n"
    "    import nest_asyncio\n"
    "    nest_asyncio.apply()\n"
    "    print(\"Setup finished! Run the next cell.\")\n"
    "    ```\n"
)

_CLEANUP_SNIPPET = (
    "    ```python\n"
    "    await page.evaluate(\"\"\"\n"
    "        const elements = document.querySelectorAll('*');\n"
    "        for (const el of elements) {\n"
    "            const style = window.getComputedStyle(el);\n"
    "            if (style.position === 'fixed' || style.position === 'sticky') {\n"
    "                el.style.display = 'none';\n"
    "            }\n"
    "        }\n"
    "        const selectors = ['nav', 'header', 'footer', '.cookie-banner', '#sidebar', '.ads'];\n"
    "        selectors.forEach(s => {\n"
    "            const el = document.querySelector(s);\n"
    "            if (el) el.style.display = 'none';\n"
    "        });\n"
    "    \"\"\")\n"
    "    ```\n"
)


def build_prompt(target_url: str, notes: str) -> str:
    return (
        "You are an expert web automation engineer.\n\n"
        "The user is a non-technical person who wants to turn a documentation website "
        "into a single PDF.\n"
        "CRITICAL CONSTRAINT: the user CANNOT install Python locally. "
        "The script must run in Google Colab.\n\n"
        "KNOWN PROBLEM: earlier scripts produced PDFs where sticky headers and floating "
        "elements covered the content. The script MUST aggressively remove every sticky "
        "header, floating footer and cookie banner before printing each page.\n\n"
        f"Target URL: {target_url}\n"
        f"User notes: {notes or '(none)'}\n\n"
        "Attached is a screenshot of the website's layout.\n\n"
        "Your task:\n"
        "1. ANALYZE the screenshot to identify the sidebar / navigation structure.\n\n"
        "2. WRITE A PYTHON SCRIPT for a Jupyter Notebook / Google Colab environment.\n"
        "  - Prerequisites block: start with cell magics that install the dependencies:\n"
        + _INSTALL_CELL +
        "  - Main logic block:\n"
        "    - Use playwright (async API), browser headless=True.\n"
        "    - Collect every documentation link from the sidebar of the Target URL.\n"
        "    - Visit the links in sidebar order.\n"
        "    - AGGRESSIVE CLEANUP: inject JavaScript that hides the sidebar, header and "
        "footer, and hides EVERY element whose computed position is fixed or sticky, "
        "for example:\n"
        + _CLEANUP_SNIPPET +
        "    - Print each page to PDF.\n"
        "    - Merge the PDFs with pypdf.\n"
        "    - Finish with google.colab.files.download('documentation.pdf').\n\n"
        "3. PROVIDE INSTRUCTIONS:\n"
        "  - Step 1: click the \"Open Google Colab\" button.\n"
        "  - Step 2: create a new notebook.\n"
        "  - Step 3: paste the code into the cell.\n"
        "  - Step 4: run it.\n\n"
        "Return a JSON object with exactly these fields:\n"
        "script       — the full Python code\n"
        "instructions — a simple step-by-step guide for Google Colab\n"
        "explanation  — a brief explanation of how the script deals with elements "
        "blocking the content (e.g. removing fixed elements)\n"
    )
