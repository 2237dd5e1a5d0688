"""Page functions evaluated through the driver.

Each function takes a single argument (a selector, or an object for writes)
and returns a plain object so the caller can tell a missing element apart
from an empty value.
"""

ELEMENT_EXISTS = "selector => document.querySelector(selector) !== null"

INNER_HTML = """selector => {
    const element = document.querySelector(selector);
    if (element === null) {
        return {found: false};
    }
    return {found: true, value: element.innerHTML};
}"""

SELECTOR_VALUE = """selector => {
    const element = document.querySelector(selector);
    if (element === null) {
        return {found: false};
    }
    return {found: true, value: 'value' in element ? element.value : null};
}"""

FILL_FORM = """({selector, value}) => {
    const element = document.querySelector(selector);
    if (element === null) {
        return {found: false, writable: false};
    }
    if (!('value' in element) || element.disabled || element.readOnly) {
        return {found: true, writable: false};
    }
    element.value = value;
    element.dispatchEvent(new Event('input', {bubbles: true}));
    element.dispatchEvent(new Event('change', {bubbles: true}));
    return {found: true, writable: true};
}"""

CLICK_ELEMENT = """selector => {
    const element = document.querySelector(selector);
    if (element === null) {
        return {found: false};
    }
    element.click();
    return {found: true};
}"""
