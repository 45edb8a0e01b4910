"""Browser script that drives the served calendar page.

The page posts venue toggles and swaps in the returned region fragments,
asks the tooltip endpoint for a day's tooltip, and runs the hide delays
locally. Configuration is read from the ``data-*`` attributes of ``main``.
"""
import json

from venue_calendar.tooltip import HIDE_DELAY, MOBILE_BREAKPOINT, TOOLTIP_HIDE_DELAY

CLIENT_ID_COOKIE = 'calendar_client_id'

_TEMPLATE = """
(function () {
  var REGION_IDS = __REGION_IDS__;
  var HIDE_DELAY_MS = __HIDE_DELAY_MS__;
  var TOOLTIP_HIDE_DELAY_MS = __TOOLTIP_HIDE_DELAY_MS__;
  var MOBILE_BREAKPOINT = __MOBILE_BREAKPOINT__;
  var COOKIE = __COOKIE__;

  var root = document.querySelector('main[data-calendar-base]');
  if (!root) { return; }
  var base = root.getAttribute('data-calendar-base');
  var year = root.getAttribute('data-year');

  var clientId = window.localStorage.getItem(COOKIE);
  if (!clientId) {
    clientId = String(Date.now()) + '-' + Math.random().toString(36).slice(2);
    window.localStorage.setItem(COOKIE, clientId);
  }
  document.cookie = COOKIE + '=' + encodeURIComponent(clientId) + '; path=/; SameSite=Lax';

  var hideTimer = null;
  var tooltipRequest = 0;

  function swap(regions) {
    Object.keys(regions).forEach(function (name) {
      var current = document.getElementById(REGION_IDS[name]);
      if (!current) { return; }
      var holder = document.createElement('div');
      holder.innerHTML = regions[name];
      current.replaceWith(holder.firstElementChild);
    });
  }

  function request(method, path, params, body) {
    var query = new URLSearchParams(params || {});
    query.set('year', year);
    return fetch(base + path + '?' + query.toString(), {
      method: method,
      headers: {'Content-Type': 'application/json', 'X-Client-Id': clientId},
      body: body === undefined ? undefined : JSON.stringify(body)
    }).then(function (response) { return response.json(); });
  }

  function post(path, body) {
    hideTooltip();
    return request('POST', path, null, body || {}).then(function (data) {
      if (data.regions) { swap(data.regions); }
    });
  }

  function cancelHide() {
    if (hideTimer !== null) {
      window.clearTimeout(hideTimer);
      hideTimer = null;
    }
  }

  function scheduleHide(delay) {
    cancelHide();
    hideTimer = window.setTimeout(function () {
      hideTimer = null;
      hideTooltip();
    }, delay);
  }

  function hideTooltip() {
    cancelHide();
    tooltipRequest += 1;
    var tooltip = document.getElementById(REGION_IDS.tooltip);
    if (tooltip) {
      tooltip.style.display = 'none';
      tooltip.setAttribute('data-current-date', '');
    }
  }

  function showTooltip(cell) {
    cancelHide();
    var rect = cell.getBoundingClientRect();
    var ticket = ++tooltipRequest;
    request('GET', '/tooltip', {
      date: cell.getAttribute('data-date'),
      left: rect.left, top: rect.top, width: rect.width, height: rect.height,
      vw: window.innerWidth, vh: window.innerHeight
    }).then(function (data) {
      if (ticket === tooltipRequest && data.regions) { swap(data.regions); }
    });
  }

  function dayCell(target) {
    return target.closest ? target.closest('.calendar-day-with-events') : null;
  }

  function inTooltip(target) {
    return target.closest ? target.closest('#' + REGION_IDS.tooltip) !== null : false;
  }

  var yearSelector = document.getElementById('year-selector');
  if (yearSelector) {
    yearSelector.addEventListener('change', function () { yearSelector.form.submit(); });
  }

  document.addEventListener('change', function (e) {
    if (e.target.classList.contains('legend-checkbox')) {
      post('/venues/' + encodeURIComponent(e.target.getAttribute('data-venue-id')),
           {checked: e.target.checked});
    }
  });

  document.addEventListener('click', function (e) {
    if (e.target.id === 'toggle-all-venues') {
      post('/venues/toggle-all');
      return;
    }
    var cell = dayCell(e.target);
    if (cell && window.innerWidth < MOBILE_BREAKPOINT) {
      var tooltip = document.getElementById(REGION_IDS.tooltip);
      var shownFor = tooltip ? tooltip.getAttribute('data-current-date') : '';
      if (shownFor === cell.getAttribute('data-date') && tooltip.style.display !== 'none') {
        hideTooltip();
      } else {
        showTooltip(cell);
      }
      return;
    }
    if (!cell && !inTooltip(e.target)) { hideTooltip(); }
  });

  document.addEventListener('mouseover', function (e) {
    if (inTooltip(e.target)) { cancelHide(); return; }
    var cell = dayCell(e.target);
    if (cell && !cell.contains(e.relatedTarget)) { showTooltip(cell); }
  });

  document.addEventListener('mouseout', function (e) {
    if (inTooltip(e.target) && !inTooltip(e.relatedTarget || document.body)) {
      scheduleHide(TOOLTIP_HIDE_DELAY_MS);
      return;
    }
    var cell = dayCell(e.target);
    if (cell && !cell.contains(e.relatedTarget)) { scheduleHide(HIDE_DELAY_MS); }
  });

  document.addEventListener('focusin', function (e) {
    var cell = dayCell(e.target);
    if (cell) { showTooltip(cell); }
  });

  document.addEventListener('focusout', function (e) {
    if (dayCell(e.target)) { scheduleHide(HIDE_DELAY_MS); }
  });
})();
"""


def build_client_script(region_ids: dict) -> str:
    """
    Script source with the region element ids and tooltip timings filled in.

    Args:
        region_ids: Region name to the id of the element it replaces

    Returns:
        JavaScript source
    """
    replacements = {
        '__REGION_IDS__': json.dumps(region_ids, sort_keys=True),
        '__HIDE_DELAY_MS__': str(round(HIDE_DELAY * 1000)),
        '__TOOLTIP_HIDE_DELAY_MS__': str(round(TOOLTIP_HIDE_DELAY * 1000)),
        '__MOBILE_BREAKPOINT__': str(MOBILE_BREAKPOINT),
        '__COOKIE__': json.dumps(CLIENT_ID_COOKIE),
    }
    script = _TEMPLATE
    for placeholder, value in replacements.items():
        script = script.replace(placeholder, value)
    return script
