from qualreport.cli import launch

launch()
