"""Playwright capture of the registration page's form controls."""

from __future__ import annotations

import logging
from typing import List, Sequence

from playwright.sync_api import ElementHandle, Page, sync_playwright
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from udyamform.scraper.extract import ElementSnapshot

logger = logging.getLogger(__name__)

CONTROL_SELECTOR = "input, select, textarea"

# Tried in order; the first visible match reveals the OTP section
OTP_TRIGGER_SELECTORS = (
    "#ctl00_ContentPlaceHolder1_btnValidateAadhaar",
    "#btnValidateAadhaar",
    'input[id*="btnGenerateOTP"]',
    'button:has-text("OTP")',
)

NAVIGATION_TIMEOUT_MS = 60_000
SETTLE_TIMEOUT_MS = 5_000


class ScrapeError(RuntimeError):
    """Raised when the page cannot be loaded or captured."""


_ATTRS_JS = """
el => {
  const out = {};
  for (const a of el.attributes) out[a.name] = a.value;
  return out;
}
"""

_LABEL_JS = """
el => {
  if (el.id) {
    const lab = document.querySelector(`label[for="${CSS.escape(el.id)}"]`);
    if (lab && lab.innerText.trim()) return lab.innerText.trim();
  }
  const wrap = el.closest('label');
  return wrap ? wrap.innerText.trim() : null;
}
"""

_OPTIONS_JS = "el => Array.from(el.options || []).map(o => [o.textContent.trim(), o.value])"


def snapshot_element(handle: ElementHandle) -> ElementSnapshot:
    tag = handle.evaluate("el => el.tagName.toLowerCase()")
    options = ()
    if tag == "select":
        options = tuple(tuple(pair) for pair in handle.evaluate(_OPTIONS_JS))
    return ElementSnapshot(
        tag=tag,
        attrs=dict(handle.evaluate(_ATTRS_JS)),
        label=handle.evaluate(_LABEL_JS),
        options=options,
    )


def capture_controls(page: Page) -> List[ElementSnapshot]:
    return [snapshot_element(h) for h in page.query_selector_all(CONTROL_SELECTOR)]


def reveal_otp_section(page: Page, selectors: Sequence[str] = OTP_TRIGGER_SELECTORS) -> bool:
    """Click the first OTP trigger found; return False when none is clickable."""
    for selector in selectors:
        handle = page.query_selector(selector)
        if handle is None or not handle.is_visible():
            continue
        try:
            handle.click()
            page.wait_for_load_state("networkidle", timeout=SETTLE_TIMEOUT_MS)
        except PlaywrightTimeoutError:
            logger.info("otp_reveal_settle_timeout selector=%s", selector)
        except PlaywrightError as exc:
            logger.info("otp_reveal_click_failed selector=%s error=%s", selector, exc)
            continue
        logger.info("otp_section_revealed selector=%s", selector)
        return True
    logger.warning("otp_trigger_not_found")
    return False


def scrape_page(url: str, *, headless: bool = True) -> tuple[List[ElementSnapshot], List[ElementSnapshot]]:
    """Load `url` and return the control snapshots before and after revealing OTP."""
    with sync_playwright() as pw:
        browser = pw.chromium.launch(headless=headless)
        try:
            page = browser.new_page()
            try:
                page.goto(url, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT_MS)
            except PlaywrightError as exc:
                raise ScrapeError(f"could not load {url}: {exc}") from exc
            step1 = capture_controls(page)
            logger.info("captured_step url=%s step=1 controls=%d", url, len(step1))
            reveal_otp_section(page)
            step2 = capture_controls(page)
            logger.info("captured_step url=%s step=2 controls=%d", url, len(step2))
            return step1, step2
        finally:
            browser.close()


__all__ = ["ScrapeError", "capture_controls", "reveal_otp_section", "scrape_page", "snapshot_element"]
