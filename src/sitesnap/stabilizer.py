"""
Page stabilization before full-page capture.

Dynamic pages rarely look the same twice: lazy images appear only once they
scroll into view, sticky headers get painted over content at every viewport
offset, and transitions leave elements half-faded. PageStabilizer drives a
loaded page into a state where a full-page screenshot is repeatable:

1. force lazy-visibility detection to report everything visible
2. scroll from the top in small steps, waiting after each one
3. stop at the bottom, or once scrolling stalls
4. jump to the very bottom and let footers settle
5. neutralize sticky positioning, skip links, lazy images and animations

It is a heuristic. Infinite-scroll and heavily animated pages may still
produce different captures across runs.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sitesnap.browser import PageDriver
from sitesnap.config import StabilizerTimings

logger = logging.getLogger(__name__)


SCROLL_TO_TOP_SCRIPT = "() => window.scrollTo(0, 0)"

SCROLL_BY_SCRIPT = "(distance) => window.scrollBy(0, distance)"

SCROLL_TO_BOTTOM_SCRIPT = """
() => window.scrollTo(0, document.body ? document.body.scrollHeight : document.documentElement.scrollHeight)
"""

SCROLL_METRICS_SCRIPT = """
() => {
    const offset = window.scrollY;
    const height = document.body ? document.body.scrollHeight : document.documentElement.scrollHeight;
    return {
        offset: offset,
        bottom: offset + window.innerHeight,
        height: height,
    };
}
"""

NEUTRALIZE_SCRIPT = """
() => {
    const all = Array.from(document.querySelectorAll('*'));

    // Sticky chrome would otherwise be painted over the content it overlaps
    all.filter(el => {
        const style = getComputedStyle(el);
        return style.position === 'fixed' || style.position === 'sticky';
    }).forEach(el => { el.style.position = 'static'; });

    document.querySelectorAll('a, button').forEach(el => {
        const text = (el.textContent || '').toLowerCase();
        if (text.includes('skip to main') || text.includes('skip to content')) {
            el.style.display = 'none';
        }
    });

    document.querySelectorAll('img').forEach(img => {
        if (img.loading === 'lazy') img.loading = 'eager';
    });

    all.forEach(el => {
        el.style.transitionDuration = '0s';
        el.style.animationDuration = '0s';
        el.style.opacity = '1';
    });
}
"""


@dataclass
class ScrollReport:
    """What the incremental scroll loop did on one page."""

    steps: int = 0
    reached_bottom: bool = False
    stalled: bool = False
    capped: bool = False


class PageStabilizer:
    """Drives a loaded page into a deterministic, screenshot-ready state."""

    def __init__(self, timings: Optional[StabilizerTimings] = None):
        """
        Initialize the stabilizer.

        Args:
            timings: Scroll step, delay and stall settings
        """
        self.timings = timings or StabilizerTimings()

    async def stabilize(self, driver: PageDriver, is_root: bool = False) -> ScrollReport:
        """
        Run the full stabilization sequence on the current page.

        Args:
            driver: PageDriver with the page already loaded
            is_root: Whether this is the scope root page (longer step delay)

        Returns:
            ScrollReport describing how the scroll loop ended
        """
        await driver.force_eager_visibility()

        report = await self.auto_scroll(driver, is_root=is_root)
        logger.debug(
            f"Scrolled {report.steps} steps "
            f"(bottom={report.reached_bottom}, stalled={report.stalled}, capped={report.capped})"
        )

        await driver.wait(self.timings.post_scroll_settle_ms)
        await self.neutralize(driver)
        await driver.wait(self.timings.restyle_settle_ms)

        return report

    async def auto_scroll(self, driver: PageDriver, is_root: bool = False) -> ScrollReport:
        """
        Scroll the page top to bottom in fixed steps to trigger lazy content.

        Terminates when the viewport bottom reaches the document height, when
        the scroll offset fails to advance on more than ``max_stalled_steps``
        consecutive steps, or after ``max_scroll_steps`` steps.

        Args:
            driver: PageDriver with the page already loaded
            is_root: Whether this is the scope root page

        Returns:
            ScrollReport
        """
        timings = self.timings
        delay = timings.root_step_delay_ms if is_root else timings.step_delay_ms

        await driver.evaluate(SCROLL_TO_TOP_SCRIPT)
        await driver.wait(timings.initial_settle_ms)

        report = ScrollReport()
        previous_offset = 0
        stalled_steps = 0

        while True:
            if report.steps >= timings.max_scroll_steps:
                report.capped = True
                logger.warning(f"Scroll cap of {timings.max_scroll_steps} steps reached")
                break

            await driver.evaluate(SCROLL_BY_SCRIPT, timings.scroll_step_px)
            await driver.wait(delay)
            report.steps += 1

            metrics = await driver.evaluate(SCROLL_METRICS_SCRIPT) or {}
            offset = metrics.get("offset", 0)
            bottom = metrics.get("bottom", 0)
            height = metrics.get("height", 0)

            if bottom >= height:
                report.reached_bottom = True
                break

            if offset == previous_offset:
                stalled_steps += 1
                if stalled_steps > timings.max_stalled_steps:
                    report.stalled = True
                    break
            else:
                stalled_steps = 0

            previous_offset = offset

        await driver.evaluate(SCROLL_TO_BOTTOM_SCRIPT)
        await driver.wait(timings.bottom_settle_ms)

        return report

    async def neutralize(self, driver: PageDriver) -> None:
        """Freeze sticky elements, skip links, lazy images and animations."""
        await driver.evaluate(NEUTRALIZE_SCRIPT)
