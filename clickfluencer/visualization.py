from __future__ import annotations

from clickfluencer.report import SimulationReport


def plot_simulation(
    report: SimulationReport,
    output_path: str | None = None,
) -> None:
    """Generate a 4-panel matplotlib visualization of simulation results.

    Requires matplotlib (optional dependency).
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError(
            "matplotlib is required for visualization. "
            "Install with: pip install clickfluencer[viz]"
        )

    fig, axes = plt.subplots(2, 2, figsize=(14, 10))
    fig.suptitle(
        f"Clickfluencer Simulation: {report.strategy_description}",
        fontsize=14,
    )
    minutes = [s.time_ms / 60_000 for s in report.snapshots]

    # 1. Creds and lifetime earnings (log scale)
    ax1 = axes[0][0]
    if report.snapshots:
        ax1.plot(minutes, [max(s.creds, 1e-10) for s in report.snapshots], label="creds")
        ax1.plot(
            minutes,
            [max(s.total_creds_earned, 1e-10) for s in report.snapshots],
            label="total earned",
        )
    ax1.set_yscale("log")
    ax1.set_xlabel("Time (min)")
    ax1.set_ylabel("Creds")
    ax1.set_title("Creds")
    ax1.legend(fontsize=8)
    ax1.grid(True, alpha=0.3)

    # 2. Production and click power
    ax2 = axes[0][1]
    if report.snapshots:
        ax2.plot(minutes, [s.creds_per_second for s in report.snapshots], label="creds/s")
        ax2.plot(minutes, [s.click_power for s in report.snapshots], label="click power")
    ax2.set_xlabel("Time (min)")
    ax2.set_title("Yields")
    ax2.legend(fontsize=8)
    ax2.grid(True, alpha=0.3)

    # 3. Purchase timeline
    ax3 = axes[1][0]
    if report.purchases:
        times = [p.time_ms / 60_000 for p in report.purchases]
        targets = [p.target_id for p in report.purchases]
        target_ids = sorted(set(targets))
        y_map = {t: i for i, t in enumerate(target_ids)}
        ax3.scatter(times, [y_map[t] for t in targets], s=10, alpha=0.6)
        ax3.set_yticks(range(len(target_ids)))
        ax3.set_yticklabels(target_ids, fontsize=7)
        ax3.set_xlabel("Time (min)")
        ax3.set_title("Purchase Timeline")
        ax3.grid(True, alpha=0.3)

    # 4. Achievement unlocks over time
    ax4 = axes[1][1]
    if report.achievements:
        times = sorted(a.time_ms / 60_000 for a in report.achievements)
        ax4.step(times, range(1, len(times) + 1), where="post")
        ax4.set_xlabel("Time (min)")
        ax4.set_ylabel("Unlocked")
        ax4.set_title("Achievements")
        ax4.grid(True, alpha=0.3)

    plt.tight_layout()

    if output_path:
        plt.savefig(output_path, dpi=150)
    else:
        plt.show()
