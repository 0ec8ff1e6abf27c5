"""
Interactive matplotlib window for a running simulation.

Keys:
    1-5        speed 1x, 2x, 5x, 0.5x, 0.1x
    s          save buffered snapshots (once per press)
    q, escape  quit
"""

import logging

from .clock import SPEED_PRESETS
from .simulation import Action, EdgeTrigger, QUIT, SAVE, Simulation

logger = logging.getLogger(__name__)

KEY_ACTIONS = {str(i + 1): Action.speed(i) for i in range(len(SPEED_PRESETS))}
KEY_ACTIONS.update({'s': SAVE, 'q': QUIT, 'escape': QUIT})


class MatplotlibRenderer:
    """Draws the string as a single line in screen space [-1, 1]."""

    def __init__(self, ax, y_limit: float = 1.0):
        self.ax = ax
        (self.line,) = ax.plot([], [], color='black', lw=1.5)
        ax.set_xlim(-1.05, 1.05)
        ax.set_ylim(-y_limit, y_limit)
        ax.set_xlabel('Position')
        ax.set_ylabel('Amplitude')
        ax.grid(True, alpha=0.3)

    def draw(self, points):
        self.line.set_data(points[:, 0], points[:, 1])


def run_interactive(simulation: Simulation, interval_ms: int = 16):
    """
    Show the simulation in a window until it is closed or quit.

    Buffered snapshots are saved on exit.
    """
    import matplotlib.pyplot as plt
    from matplotlib.animation import FuncAnimation

    # Free 's' and 'q' from matplotlib's default save/quit bindings
    for keymap in ('keymap.save', 'keymap.quit'):
        plt.rcParams[keymap] = [k for k in plt.rcParams[keymap] if k not in KEY_ACTIONS]

    fig, ax = plt.subplots(figsize=(10, 5))
    peak = float(abs(simulation.state.positions).max()) or 1.0
    renderer = MatplotlibRenderer(ax, y_limit=1.5 * peak)
    simulation.renderer = renderer
    status = ax.text(0.02, 0.95, '', transform=ax.transAxes, va='top', fontsize=9)
    trigger = EdgeTrigger()

    def on_press(event):
        action = KEY_ACTIONS.get(event.key)
        if action is None or not trigger.press(event.key):
            return
        simulation.handle(action)
        if action is QUIT:
            plt.close(fig)

    def on_release(event):
        trigger.release(event.key)

    def update(_frame):
        simulation.frame()
        status.set_text(f"t = {simulation.sim_time:5.1f} s   "
                        f"speed {simulation.clock.speed:g}x   "
                        f"buffered {len(simulation.buffer)}")
        return renderer.line, status

    fig.canvas.mpl_connect('key_press_event', on_press)
    fig.canvas.mpl_connect('key_release_event', on_release)
    if fig.canvas.manager is not None:
        fig.canvas.manager.set_window_title('Waves on a string')

    anim = FuncAnimation(fig, update, interval=interval_ms, blit=False,
                         cache_frame_data=False)
    try:
        plt.show()
    finally:
        simulation.close(drain=True)
    return anim
