from __future__ import annotations

from signalsalvage.report import SimulationReport


def plot_simulation(
    report: SimulationReport,
    output_path: str | None = None,
) -> None:
    """Four-panel pacing chart: currencies, rates, purchases, purchase gaps."""
    import matplotlib.pyplot as plt

    fig, axes = plt.subplots(2, 2, figsize=(14, 10))
    fig.suptitle(f"Signal & Salvage: {report.strategy_description}", fontsize=14)

    # 1. Currency values over time (log scale)
    ax1 = axes[0][0]
    currencies = sorted({s.currency for s in report.currency_snapshots})
    for currency in currencies:
        series = report.currency_series(currency)
        if series and any(v > 0 for _, v in series):
            times, values = zip(*series)
            ax1.plot(times, [max(v, 1e-10) for v in values], label=currency)
    ax1.set_yscale("log")
    ax1.set_xlabel("Time (s)")
    ax1.set_ylabel("Value")
    ax1.set_title("Currencies")
    ax1.legend(fontsize=8)
    ax1.grid(True, alpha=0.3)
    for r in report.resets:
        ax1.axvline(r.time, color="grey", linestyle=":", alpha=0.6)

    # 2. Production rates over time
    ax2 = axes[0][1]
    for currency in currencies:
        series = report.rate_series(currency)
        if series and any(r > 0 for _, r in series):
            times, rates = zip(*series)
            ax2.plot(times, rates, label=currency)
    ax2.set_xlabel("Time (s)")
    ax2.set_ylabel("Rate (/s)")
    ax2.set_title("Production Rates")
    ax2.legend(fontsize=8)
    ax2.grid(True, alpha=0.3)

    # 3. Purchase timeline
    ax3 = axes[1][0]
    if report.purchases:
        ids = [p.item_id for p in report.purchases]
        labels = sorted(set(ids))
        y_map = {label: i for i, label in enumerate(labels)}
        ax3.scatter([p.time for p in report.purchases], [y_map[i] for i in ids], s=10, alpha=0.6)
        ax3.set_yticks(range(len(labels)))
        ax3.set_yticklabels(labels, fontsize=7)
        ax3.set_xlabel("Time (s)")
        ax3.set_title("Purchase Timeline")
        ax3.grid(True, alpha=0.3)

    # 4. Purchase gap histogram
    ax4 = axes[1][1]
    if report.purchase_gaps:
        ax4.hist(report.purchase_gaps, bins=min(30, len(report.purchase_gaps)), alpha=0.7)
        ax4.axvline(
            report.mean_purchase_gap,
            color="red",
            linestyle="--",
            label=f"Mean: {report.mean_purchase_gap:.1f}s",
        )
        ax4.set_xlabel("Gap (s)")
        ax4.set_ylabel("Count")
        ax4.set_title("Purchase Gap Distribution")
        ax4.legend()
        ax4.grid(True, alpha=0.3)

    plt.tight_layout()

    if output_path:
        plt.savefig(output_path, dpi=150)
        plt.close(fig)
    else:
        plt.show()
