from fastapi import APIRouter
from fastapi.responses import HTMLResponse
import json

from ..models import FALLBACK_SONGS

router = APIRouter(tags=["ui"])

# ---------------- UI: music player ----------------
@router.get("/", response_class=HTMLResponse)
@router.get("/player", response_class=HTMLResponse)
def player():
    fallback_json = json.dumps([s.to_wire() for s in FALLBACK_SONGS])

    html = f"""<!doctype html>
<html>
<head>
<meta charset="utf-8"/>
<meta name="viewport" content="width=device-width, initial-scale=1"/>
<title>Music Player</title>
<style>
  body{{font-family:system-ui,Segoe UI,Roboto,Arial;margin:0}}
  main{{max-width:960px;margin:0 auto;padding:16px 24px 40px}}
  .grid{{display:grid;grid-template-columns:2fr 1fr;gap:24px}}
  @media (max-width:800px){{.grid{{grid-template-columns:1fr}}}}
  .card{{border:1px solid #eee;border-radius:8px;padding:16px}}
  .muted{{color:#666;font-size:14px}}
  .notice{{margin-top:8px;padding:8px;border:1px solid #fde68a;background:#fefce8;color:#a16207;border-radius:6px;font-size:14px}}
  .warn{{margin-top:12px;padding:8px;border:1px solid #fcd34d;background:#fffbeb;color:#b45309;border-radius:6px;font-size:14px}}
  .song{{padding:10px;border:1px solid #eee;border-radius:8px;margin-bottom:8px;cursor:pointer;display:flex;justify-content:space-between;align-items:center}}
  .song:hover{{background:#fafafa}}
  .song.sel{{background:#eff6ff;border-color:#bfdbfe}}
  .bar{{width:100%;height:8px;background:#e5e7eb;border-radius:999px;overflow:hidden;margin:10px 0}}
  .fill{{height:8px;background:#3b82f6;width:0%;transition:width .3s}}
  .btn{{padding:6px 10px;border-radius:6px;border:1px solid #ddd;background:#fafafa;cursor:pointer}}
  .btn:disabled{{opacity:.5;cursor:default}}
  .x{{float:right;cursor:pointer;border:none;background:none}}
</style>
</head>
<body>
<main>
  <h1>🔊 Music Player</h1>
  <p class="muted">Select a song and enjoy your music</p>
  <div id="degraded" class="notice" hidden>📝 Note: Using predefined songs (server not available)</div>

  <div id="loading" class="muted" style="padding:48px 0;text-align:center">Loading songs...</div>

  <div class="grid" id="app" hidden>
    <section class="card">
      <h2>Songs</h2>
      <p class="muted">Click on a song to select it for playback</p>
      <div id="songs"></div>
    </section>
    <section class="card">
      <h2>Now Playing</h2>
      <div id="empty" class="muted" style="text-align:center;padding:24px 0">Select a song to start playing</div>
      <div id="now" hidden>
        <h3 id="title"></h3>
        <div class="muted"><span id="pos">0:00</span> / <span id="dur">0:00</span></div>
        <div class="bar"><div class="fill" id="fill"></div></div>
        <div style="display:flex;gap:12px;justify-content:center">
          <button class="btn" id="btnPlay" onclick="playPause()">▶️ Play</button>
          <button class="btn" id="btnStop" onclick="stop()">⏹️ Stop</button>
        </div>
        <div id="error" class="warn" hidden><button class="x" onclick="dismissError()">✕</button>⚠️ <span id="errmsg"></span></div>
      </div>
    </section>
  </div>
</main>

<script>
// NOTE: This block is inside a Python f-string. JS braces are doubled {{ }}.

const API = (window.location.pathname.indexOf("/songbox/") !== -1) ? "/songbox/api" : "/api";
const FALLBACK = {fallback_json};

// ---------- catalog ----------
let SONGS = [];
let DEGRADED = false;

async function loadSongs() {{
  try {{
    const res = await fetch(API + "/songs");
    if (!res.ok) throw new Error("HTTP " + res.status);
    const data = await res.json();
    if (!Array.isArray(data)) throw new Error("malformed catalog");
    SONGS = data; DEGRADED = false;
  }} catch (e) {{
    console.error("Failed to load songs from server:", e);
    console.log("Using predefined songs as fallback");
    SONGS = FALLBACK; DEGRADED = true;
  }}
  document.getElementById('loading').hidden = true;
  document.getElementById('app').hidden = false;
  document.getElementById('degraded').hidden = !DEGRADED;
  renderSongs();
}}

// ---------- playback state machine ----------
// idle -> ready -> playing -> ready; any failure -> error (song stays selected)
const audio = new Audio();
let state = "idle";
let song = null;
let position = 0, duration = 0, lastError = null;
let epoch = 0;
let pendingStart = null;   // epoch of the latest play() still in flight

function setState(s, err) {{
  state = s;
  if (err !== undefined) lastError = err;
  render();
}}

function selectSong(s) {{
  epoch++;
  song = s; position = 0; duration = 0; lastError = null;
  audio.src = s.audioUrl;
  audio.load();
  setState("ready");
  renderSongs();
}}

async function playPause() {{
  if (!song) return;
  if (state === "playing") {{
    epoch++;
    audio.pause();
    setState("ready");
    return;
  }}
  if (pendingStart !== null && pendingStart === epoch) return;  // already starting
  const mine = ++epoch;
  pendingStart = mine;
  try {{
    await audio.play();
  }} catch (e) {{
    if (pendingStart === mine) pendingStart = null;
    if (mine !== epoch) return;
    setState("error", "Failed to play audio - demo URLs may not be accessible");
    return;
  }}
  if (mine !== epoch) {{
    // superseded; only silence the audio if no newer start owns it
    if (pendingStart === mine) {{
      pendingStart = null;
      if (state !== "playing") audio.pause();
    }}
    return;
  }}
  pendingStart = null;
  lastError = null;
  setState("playing");
}}

function stop() {{
  if (!song) return;
  epoch++;
  audio.pause();
  audio.currentTime = 0;
  position = 0;
  setState("ready");
}}

function dismissError() {{
  lastError = null;
  if (state === "error") state = "ready";
  render();
}}

audio.addEventListener('loadedmetadata', () => {{
  if (!song) return;
  duration = isFinite(audio.duration) ? audio.duration : 0;
  render();
}});
audio.addEventListener('timeupdate', () => {{
  if (!song) return;
  position = audio.currentTime || 0;
  render();
}});
audio.addEventListener('ended', () => {{
  if (!song) return;
  position = 0;
  if (state === "playing") setState("ready"); else render();
}});
audio.addEventListener('error', () => {{
  if (!song || !audio.getAttribute('src')) return;
  epoch++;
  setState("error", "Error loading audio file - using demo audio URLs");
}});

window.addEventListener('pagehide', () => {{
  audio.pause();
  audio.removeAttribute('src');
  audio.load();
}});

// ---------- rendering ----------
function formatTime(t) {{
  if (!t || t < 0) return "0:00";
  const m = Math.floor(t / 60), s = Math.floor(t % 60);
  return m + ":" + String(s).padStart(2, "0");
}}

function escapeHtml(s) {{
  return String(s).replace(/[&<>"']/g, c => ({{"&":"&amp;","<":"&lt;",">":"&gt;","\\"":"&quot;","'":"&#39;"}})[c]);
}}

function renderSongs() {{
  const box = document.getElementById('songs');
  if (SONGS.length === 0) {{
    box.innerHTML = "<p class='muted' style='text-align:center;padding:32px 0'>No songs available</p>";
    return;
  }}
  box.innerHTML = SONGS.map((s, i) => {{
    const sel = song && song.id === s.id;
    const added = new Date(s.created_at).toLocaleDateString();
    return "<div class='song" + (sel ? " sel" : "") + "' data-i='" + i + "'>" +
             "<div><b>" + escapeHtml(s.name) + "</b><div class='muted'>Added: " + added + "</div></div>" +
             (sel ? "<span class='muted' style='color:#2563eb'>● Selected</span>" : "") +
           "</div>";
  }}).join("");
  box.querySelectorAll('.song').forEach(el => {{
    el.addEventListener('click', () => selectSong(SONGS[Number(el.getAttribute('data-i'))]));
  }});
}}

function render() {{
  document.getElementById('empty').hidden = !!song;
  document.getElementById('now').hidden = !song;
  if (!song) return;
  document.getElementById('title').textContent = song.name;
  document.getElementById('pos').textContent = formatTime(position);
  document.getElementById('dur').textContent = formatTime(duration);
  document.getElementById('fill').style.width = duration > 0 ? Math.min(100, position / duration * 100) + "%" : "0%";
  document.getElementById('btnPlay').textContent = state === "playing" ? "⏸️ Pause" : "▶️ Play";
  document.getElementById('error').hidden = !lastError;
  document.getElementById('errmsg').textContent = lastError || "";
}}

loadSongs();
</script>
</body>
</html>"""
    return HTMLResponse(html, status_code=200)
