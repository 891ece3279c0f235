"""In-page measurement scripts evaluated through the page session."""

TIMING_SCRIPT = """
async () => {
    const nav = performance.getEntriesByType('navigation')[0];
    const paint = performance.getEntriesByName('first-contentful-paint')[0];
    const observe = (type) => new Promise(resolve => {
        const entries = [];
        try {
            const po = new PerformanceObserver(list => entries.push(...list.getEntries()));
            po.observe({ type, buffered: true });
            setTimeout(() => { po.disconnect(); resolve(entries); }, 100);
        } catch (e) {
            resolve(entries);
        }
    });
    const lcpEntries = await observe('largest-contentful-paint');
    const shiftEntries = await observe('layout-shift');
    const resources = performance.getEntriesByType('resource');
    const since = (t) => nav ? Math.max(0, t - nav.startTime) : 0;
    return {
        loadTime: nav ? since(nav.loadEventEnd) : 0,
        domContentLoaded: nav ? since(nav.domContentLoadedEventEnd) : 0,
        timeToInteractive: nav ? since(nav.domInteractive) : 0,
        firstContentfulPaint: paint ? paint.startTime : 0,
        largestContentfulPaint: lcpEntries.length ? lcpEntries[lcpEntries.length - 1].startTime : 0,
        cumulativeLayoutShift: shiftEntries
            .filter(e => !e.hadRecentInput)
            .reduce((sum, e) => sum + e.value, 0),
        totalSize: resources.reduce((sum, r) => sum + (r.transferSize || 0), nav ? (nav.transferSize || 0) : 0),
        resourceUrls: resources.map(r => r.name),
    };
}
"""

IMAGES_SCRIPT = """
() => Array.from(document.images).map(img => ({
    src: img.getAttribute('src'),
    alt: img.getAttribute('alt'),
    loading: img.getAttribute('loading'),
    naturalWidth: img.naturalWidth || 0,
    renderedWidth: img.clientWidth || 0,
}))
"""

LINKS_SCRIPT = """
() => Array.from(document.querySelectorAll('a[href]')).map(a => ({
    href: a.getAttribute('href'),
    absolute: a.href,
    text: (a.textContent || '').trim(),
    rel: a.getAttribute('rel'),
}))
"""

BODY_TEXT_SCRIPT = """
() => document.body ? (document.body.innerText || document.body.textContent || '') : ''
"""

ACCESSIBILITY_SCRIPT = """
() => {
    const hasText = el => (el.textContent || '').trim().length > 0;
    const labelled = el => (el.getAttribute('aria-label') || '').trim() || (el.getAttribute('title') || '').trim();
    const inputs = Array.from(document.querySelectorAll('input, textarea, select'))
        .filter(el => (el.getAttribute('type') || '').toLowerCase() !== 'hidden');
    const inputsMissingLabel = inputs.filter(el => {
        if (labelled(el)) return false;
        if (el.id && document.querySelector(`label[for="${CSS.escape(el.id)}"]`)) return false;
        return !el.closest('label');
    }).length;
    const buttonsMissingLabel = Array.from(document.querySelectorAll('button'))
        .filter(el => !hasText(el) && !labelled(el)).length;
    const emptyHeadings = Array.from(document.querySelectorAll('h1, h2, h3, h4, h5, h6'))
        .filter(el => !hasText(el)).length;
    const lang = (document.documentElement.getAttribute('lang') || '').trim();
    return { inputsMissingLabel, buttonsMissingLabel, emptyHeadings, missingLang: !lang };
}
"""

MOBILE_SCRIPT = """
() => {
    const doc = document.documentElement;
    const overflow = doc.scrollWidth > window.innerWidth + 1;
    const smallTargets = Array.from(document.querySelectorAll('a[href], button'))
        .map(el => el.getBoundingClientRect())
        .filter(r => r.width > 0 && r.height > 0 && (r.width < 24 || r.height < 24)).length;
    return { horizontalOverflow: overflow, smallTouchTargets: smallTargets };
}
"""

RESOURCES_SCRIPT = """
() => {
    const entries = performance.getEntriesByType('resource');
    const isImage = r => r.initiatorType === 'img' || /\\.(jpe?g|png|gif|webp|avif|svg)(\\?|$)/i.test(r.name);
    const js = entries.filter(r => r.initiatorType === 'script' || /\\.m?js(\\?|$)/i.test(r.name));
    const css = entries.filter(r => (r.initiatorType === 'link' || r.initiatorType === 'css') && /\\.css(\\?|$)/i.test(r.name));
    const images = entries.filter(isImage);
    const blockingScripts = Array.from(document.querySelectorAll('head script[src]'))
        .filter(s => !s.async && !s.defer && s.type !== 'module').length;
    const blockingStyles = Array.from(document.querySelectorAll('head link[rel="stylesheet"]'))
        .filter(l => !l.media || l.media === 'all' || l.media === 'screen').length;
    return {
        javascript: { total: js.length, blocking: blockingScripts },
        css: { total: css.length, blocking: blockingStyles },
        images: {
            total: images.length,
            totalSize: images.reduce((sum, r) => sum + (r.transferSize || 0), 0),
            unoptimized: images.filter(r => (r.transferSize || 0) > 200 * 1024).length,
        },
    };
}
"""

TESTIMONIALS_SCRIPT = """
() => Array.from(document.querySelectorAll(
    '[class*="testimonial" i], [id*="testimonial" i], [class*="review" i], blockquote'
)).map(el => (el.textContent || '').trim()).filter(Boolean)
"""
